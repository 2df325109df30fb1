"""Forme derivate delle voci catalogo usate dal matching.

Il motore di matching legge solo ``full_name_lower`` e ``full_name_normalized``;
i campi per attributo servono al report per riga.
"""
from __future__ import annotations

from dataclasses import dataclass

from app.domain.catalog.models import DeviceKind, EbayDeviceModel, EbayVehicleModel
from app.domain.ranges.models import Range

from .normalization import normalize_lower, normalize_text


@dataclass(frozen=True)
class DerivedEntry:
    full_name: str
    full_name_lower: str
    full_name_normalized: str
    primary_lower: str = ""
    primary_normalized: str = ""
    secondary_lower: str = ""
    secondary_normalized: str = ""

    @property
    def primary_attribute(self) -> str | None:
        return None

    @property
    def secondary_attribute(self) -> str | None:
        return None

    @property
    def device_kind(self) -> DeviceKind | None:
        return None

    @property
    def is_existing_range(self) -> bool:
        return False


@dataclass(frozen=True)
class VehicleEntry(DerivedEntry):
    make: str = ""
    model: str = ""

    @classmethod
    def from_record(cls, record: EbayVehicleModel) -> "VehicleEntry":
        full_name = record.full_name or f"{record.make} {record.model}"
        return cls(
            full_name=full_name,
            full_name_lower=normalize_lower(full_name),
            full_name_normalized=normalize_text(full_name),
            primary_lower=normalize_lower(record.make),
            primary_normalized=normalize_text(record.make),
            secondary_lower=normalize_lower(record.model),
            secondary_normalized=normalize_text(record.model),
            make=record.make,
            model=record.model,
        )

    @property
    def primary_attribute(self) -> str | None:
        return self.make

    @property
    def secondary_attribute(self) -> str | None:
        return self.model


@dataclass(frozen=True)
class DeviceEntry(DerivedEntry):
    brand: str = ""
    model: str = ""
    kind: DeviceKind | None = None

    @classmethod
    def from_record(cls, record: EbayDeviceModel) -> "DeviceEntry":
        brand = record.brand or ""
        model = record.model or ""
        return cls(
            full_name=record.full_name,
            full_name_lower=normalize_lower(record.full_name),
            full_name_normalized=normalize_text(record.full_name),
            primary_lower=normalize_lower(brand),
            primary_normalized=normalize_text(brand),
            secondary_lower=normalize_lower(model),
            secondary_normalized=normalize_text(model),
            brand=brand,
            model=model,
            kind=record.device_kind,
        )

    @property
    def primary_attribute(self) -> str | None:
        return self.brand

    @property
    def secondary_attribute(self) -> str | None:
        return self.model

    @property
    def device_kind(self) -> DeviceKind | None:
        return self.kind


@dataclass(frozen=True)
class RangeEntry(DerivedEntry):
    """Range esistente della categoria, convertito nella stessa forma (attributi vuoti)."""

    range_id: int | None = None

    @classmethod
    def from_range(cls, record: Range) -> "RangeEntry":
        return cls(
            full_name=record.name,
            full_name_lower=normalize_lower(record.name),
            full_name_normalized=normalize_text(record.name),
            range_id=record.id,
        )

    @property
    def is_existing_range(self) -> bool:
        return True


__all__ = ["DerivedEntry", "DeviceEntry", "RangeEntry", "VehicleEntry"]
