"""Catalog domain models (eBay vehicle and device taxonomies)."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel, UniqueConstraint


class CatalogKind(str, Enum):
    """Famiglie di catalogo, una snapshot di cache per ciascuna."""
    vehicles = "vehicles"
    devices = "devices"


class DeviceKind(str, Enum):
    cellphone = "cellphone"
    tablet = "tablet"


class SearchType(str, Enum):
    """Tipo di ricerca richiesto dall'analisi testo."""
    vehicles = "vehicles"
    devices = "devices"
    cellphones = "cellphones"
    tablets = "tablets"

    @property
    def catalog_kind(self) -> CatalogKind:
        if self is SearchType.vehicles:
            return CatalogKind.vehicles
        return CatalogKind.devices

    @property
    def device_kind(self) -> DeviceKind | None:
        if self is SearchType.cellphones:
            return DeviceKind.cellphone
        if self is SearchType.tablets:
            return DeviceKind.tablet
        return None


class EbayVehicleModel(SQLModel, table=True):
    """Coppia marca/modello veicolo dalla tassonomia compatibilità eBay Motors."""

    __tablename__ = "ebay_vehicle_model"

    id: Optional[int] = Field(default=None, primary_key=True)
    make: str = Field(index=True, description="es. Honda")
    model: str = Field(index=True, description="es. Accord")
    full_name: str = Field(unique=True, index=True, description="es. Honda Accord")
    years: Optional[list[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    ebay_category_id: Optional[str] = Field(default=None)
    source: str = Field(default="ebay")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EbayDeviceModel(SQLModel, table=True):
    """Modello telefono/tablet dagli aspect di categoria eBay."""

    __tablename__ = "ebay_device_model"
    __table_args__ = (
        UniqueConstraint(
            "full_name",
            "ebay_category_id",
            name="uq_ebay_device_model_name_category",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    full_name: str = Field(index=True)
    brand: str = Field(default="", index=True)
    model: str = Field(default="")
    device_kind: DeviceKind = Field(index=True)
    ebay_category_id: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
