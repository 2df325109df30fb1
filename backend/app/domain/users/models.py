"""User domain models."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    """User roles for authorization."""
    superadmin = "superadmin"
    listingadmin = "listingadmin"
    lister = "lister"
    advancelister = "advancelister"
    trainee = "trainee"
    viewer = "viewer"


ADMIN_ROLES = frozenset({UserRole.superadmin, UserRole.listingadmin})
"""Ruoli che possono operare su assignment altrui."""

LISTING_ROLES = (
    UserRole.superadmin,
    UserRole.listingadmin,
    UserRole.lister,
    UserRole.advancelister,
    UserRole.trainee,
)
"""Ruoli abilitati all'analisi range e al salvataggio delle quantità."""


class User(SQLModel, table=True):
    """Identity row mirrored from the external auth service."""
    __tablename__ = "app_user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: Optional[str] = None
    role: UserRole = Field(default=UserRole.viewer)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
