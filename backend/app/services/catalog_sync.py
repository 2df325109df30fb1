"""Import dei modelli catalogo già scaricati dalla tassonomia eBay.

Il download dalle API eBay è responsabilità del job di sincronizzazione
esterno; qui si fa solo l'upsert delle righe ricevute e l'invalidazione della
cache, che non viene mai avvisata automaticamente delle scritture.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.catalog.models import (
    CatalogKind,
    DeviceKind,
    EbayDeviceModel,
    EbayVehicleModel,
)
from app.schemas import DeviceModelImportRow, VehicleModelImportRow
from app.services.ranges.cache import CatalogCache
from app.services.ranges.config import DEVICE_NAME_PREFIXES_TO_STRIP, KNOWN_DEVICE_BRANDS

logger = logging.getLogger(__name__)


@dataclass
class CatalogImportStats:
    added: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    total_in_database: int = 0


def extract_brand_from_model(model_name: str) -> str:
    """Brand noto a inizio nome, altrimenti la prima parola se capitalizzata."""
    lowered = model_name.lower()
    for brand in KNOWN_DEVICE_BRANDS:
        if lowered.startswith(brand.lower()):
            return brand

    first_word = model_name.replace("-", " ").split(" ")[0] if model_name else ""
    if len(first_word) > 1 and first_word[0] == first_word[0].upper() and first_word[0].isalpha():
        return first_word
    return ""


def clean_device_name(raw_name: str | None) -> str:
    name = (raw_name or "").strip()
    for prefix in DEVICE_NAME_PREFIXES_TO_STRIP:
        if name.startswith(prefix):
            name = name[len(prefix):].strip()
    return name


def _existing_vehicle_models(session: Session, names: list[str]) -> dict[str, EbayVehicleModel]:
    if not names:
        return {}
    statement = select(EbayVehicleModel).where(EbayVehicleModel.full_name.in_(names))
    return {record.full_name: record for record in session.exec(statement).all()}


def _existing_device_models(
    session: Session, names: list[str]
) -> dict[tuple[str, str | None], EbayDeviceModel]:
    if not names:
        return {}
    statement = select(EbayDeviceModel).where(EbayDeviceModel.full_name.in_(names))
    return {
        (record.full_name, record.ebay_category_id): record
        for record in session.exec(statement).all()
    }


def list_vehicle_models(session: Session) -> list[EbayVehicleModel]:
    statement = select(EbayVehicleModel).order_by(EbayVehicleModel.full_name)
    return list(session.exec(statement).all())


def list_device_models(
    session: Session, device_kind: DeviceKind | None = None
) -> list[EbayDeviceModel]:
    statement = select(EbayDeviceModel)
    if device_kind is not None:
        statement = statement.where(EbayDeviceModel.device_kind == device_kind)
    return list(session.exec(statement.order_by(EbayDeviceModel.full_name)).all())


class CatalogSyncService:

    def __init__(self, cache: CatalogCache) -> None:
        self.cache = cache

    def import_vehicle_models(
        self, session: Session, rows: Iterable[VehicleModelImportRow]
    ) -> CatalogImportStats:
        stats = CatalogImportStats()
        prepared: dict[str, VehicleModelImportRow] = {}
        for row in rows:
            make = (row.make or "").strip()
            model = (row.model or "").strip()
            if not make or not model:
                stats.errors += 1
                continue
            full_name = (row.full_name or f"{make} {model}").strip()
            if full_name in prepared:
                stats.skipped += 1
                continue
            prepared[full_name] = row.model_copy(
                update={"make": make, "model": model, "full_name": full_name}
            )

        existing = _existing_vehicle_models(session, list(prepared))

        now = datetime.now(timezone.utc)
        for full_name, row in prepared.items():
            record = existing.get(full_name)
            try:
                # Savepoint per riga: un conflitto non annulla il resto del batch
                with session.begin_nested():
                    if record is None:
                        session.add(
                            EbayVehicleModel(
                                make=row.make,
                                model=row.model,
                                full_name=full_name,
                                years=row.years,
                                ebay_category_id=row.ebay_category_id,
                                source=row.source,
                            )
                        )
                    else:
                        record.make = row.make
                        record.model = row.model
                        record.years = row.years or record.years
                        record.ebay_category_id = row.ebay_category_id or record.ebay_category_id
                        record.source = row.source
                        record.updated_at = now
                        session.add(record)
                    session.flush()
            except IntegrityError as exc:
                stats.errors += 1
                logger.warning("Import veicoli: '%s' non salvato: %s", full_name, exc.orig)
                continue
            if record is None:
                stats.added += 1
            else:
                stats.updated += 1

        session.commit()
        stats.total_in_database = session.exec(
            select(func.count()).select_from(EbayVehicleModel)
        ).one()

        self.cache.invalidate(CatalogKind.vehicles)
        logger.info(
            "Import veicoli: aggiunti %d, aggiornati %d, duplicati %d, errori %d, totale %d",
            stats.added,
            stats.updated,
            stats.skipped,
            stats.errors,
            stats.total_in_database,
        )
        return stats

    def import_device_models(
        self, session: Session, rows: Iterable[DeviceModelImportRow]
    ) -> CatalogImportStats:
        stats = CatalogImportStats()
        prepared: dict[tuple[str, str | None], dict] = {}
        for row in rows:
            name = clean_device_name(row.full_name)
            if not name:
                stats.errors += 1
                continue
            key = (name, row.ebay_category_id)
            if key in prepared:
                stats.skipped += 1
                continue
            brand = (row.brand or "").strip() or extract_brand_from_model(name)
            model = (row.model or "").strip() or (name[len(brand):].strip() if brand else name)
            prepared[key] = {
                "full_name": name,
                "brand": brand,
                "model": model,
                "device_kind": row.device_kind,
                "ebay_category_id": row.ebay_category_id,
            }

        existing = _existing_device_models(session, sorted({name for name, _ in prepared}))

        now = datetime.now(timezone.utc)
        for key, values in prepared.items():
            record = existing.get(key)
            try:
                with session.begin_nested():
                    if record is None:
                        session.add(EbayDeviceModel(**values))
                    else:
                        record.brand = values["brand"]
                        record.model = values["model"]
                        record.device_kind = values["device_kind"]
                        record.updated_at = now
                        session.add(record)
                    session.flush()
            except IntegrityError as exc:
                stats.errors += 1
                logger.warning("Import dispositivi: '%s' non salvato: %s", values["full_name"], exc.orig)
                continue
            if record is None:
                stats.added += 1
            else:
                stats.updated += 1

        session.commit()
        stats.total_in_database = session.exec(
            select(func.count()).select_from(EbayDeviceModel)
        ).one()

        self.cache.invalidate(CatalogKind.devices)
        logger.info(
            "Import dispositivi: aggiunti %d, aggiornati %d, duplicati %d, errori %d, totale %d",
            stats.added,
            stats.updated,
            stats.skipped,
            stats.errors,
            stats.total_in_database,
        )
        return stats


__all__ = [
    "CatalogImportStats",
    "CatalogSyncService",
    "clean_device_name",
    "extract_brand_from_model",
    "list_device_models",
    "list_vehicle_models",
]
