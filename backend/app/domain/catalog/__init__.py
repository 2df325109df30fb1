"""Catalog domain (eBay vehicle and device taxonomies)."""
from .models import (
    CatalogKind,
    DeviceKind,
    EbayDeviceModel,
    EbayVehicleModel,
    SearchType,
)

__all__ = [
    "CatalogKind",
    "DeviceKind",
    "EbayDeviceModel",
    "EbayVehicleModel",
    "SearchType",
]
