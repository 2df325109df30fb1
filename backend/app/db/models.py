"""Database models - Compatibility layer.

All models live in their respective domain packages:

- Users: app.domain.users.models
- Catalog (eBay vehicle/device taxonomies): app.domain.catalog.models
- Ranges: app.domain.ranges.models
- Assignments: app.domain.assignments.models

For new code, import from the domain packages directly. This module
re-exports everything so that ``SQLModel.metadata`` is fully populated
by a single import.
"""
from __future__ import annotations

from app.domain.users.models import (
    ADMIN_ROLES,
    LISTING_ROLES,
    User,
    UserRole,
)
from app.domain.catalog.models import (
    CatalogKind,
    DeviceKind,
    EbayDeviceModel,
    EbayVehicleModel,
    SearchType,
)
from app.domain.ranges.models import UNKNOWN_RANGE_NAME, Range
from app.domain.assignments.models import Assignment

__all__ = [
    # Users
    "ADMIN_ROLES",
    "LISTING_ROLES",
    "User",
    "UserRole",
    # Catalog
    "CatalogKind",
    "DeviceKind",
    "EbayDeviceModel",
    "EbayVehicleModel",
    "SearchType",
    # Ranges
    "UNKNOWN_RANGE_NAME",
    "Range",
    # Assignments
    "Assignment",
]
