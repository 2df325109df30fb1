"""Cache in memoria dei cataloghi modelli con campi di confronto precalcolati.

Evita di rileggere migliaia di righe dal DB a ogni analisi. Ogni rebuild
pubblica una snapshot nuova e immutabile sostituendo il riferimento: i lettori
concorrenti vedono la snapshot vecchia o quella nuova, mai una parziale.
"""
from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import timedelta
import logging
from threading import Lock
import time
from typing import Callable, Mapping, Sequence

from sqlmodel import Session, select

from app.core import settings
from app.domain.catalog.models import CatalogKind, EbayDeviceModel, EbayVehicleModel

from .entries import DerivedEntry, DeviceEntry, VehicleEntry

logger = logging.getLogger(__name__)

CatalogLoader = Callable[[CatalogKind], Sequence[DerivedEntry]]


@dataclass(frozen=True)
class CatalogSnapshot:
    kind: CatalogKind
    entries: tuple[DerivedEntry, ...]
    built_at: float


def load_catalog_entries(session: Session, kind: CatalogKind) -> list[DerivedEntry]:
    """Legge tutte le voci di un catalogo e ne deriva i campi di confronto."""
    if kind is CatalogKind.vehicles:
        vehicles = session.exec(select(EbayVehicleModel)).all()
        return [VehicleEntry.from_record(record) for record in vehicles]
    devices = session.exec(select(EbayDeviceModel)).all()
    return [DeviceEntry.from_record(record) for record in devices]


def default_ttls() -> dict[CatalogKind, timedelta]:
    return {
        CatalogKind.vehicles: timedelta(hours=settings.vehicle_cache_ttl_hours),
        CatalogKind.devices: timedelta(hours=settings.device_cache_ttl_hours),
    }


class CatalogCache:
    """Snapshot per tipo di catalogo con validità a tempo e invalidazione esplicita.

    ``clock`` restituisce secondi monotoni; i test passano un orologio finto.
    """

    def __init__(
        self,
        loader: CatalogLoader,
        ttls: Mapping[CatalogKind, timedelta] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttls = dict(ttls or default_ttls())
        self._clock = clock
        self._snapshots: dict[CatalogKind, CatalogSnapshot] = {}
        self._generations: dict[CatalogKind, int] = {kind: 0 for kind in CatalogKind}
        self._locks: dict[CatalogKind, Lock] = {kind: Lock() for kind in CatalogKind}
        # Confronto della generazione e pubblicazione avvengono insieme a invalidate()
        self._publish_locks: dict[CatalogKind, Lock] = {kind: Lock() for kind in CatalogKind}

    def ttl_seconds(self, kind: CatalogKind) -> float:
        return self._ttls[kind].total_seconds()

    def _is_fresh(self, snapshot: CatalogSnapshot | None, now: float) -> bool:
        if snapshot is None:
            return False
        return now - snapshot.built_at < self.ttl_seconds(snapshot.kind)

    def snapshot(self, kind: CatalogKind) -> CatalogSnapshot | None:
        return self._snapshots.get(kind)

    def get(self, kind: CatalogKind, force_refresh: bool = False) -> tuple[DerivedEntry, ...]:
        """Restituisce le voci del catalogo, ricostruendo la snapshot se scaduta."""
        if not force_refresh:
            snapshot = self._snapshots.get(kind)
            if self._is_fresh(snapshot, self._clock()):
                return snapshot.entries

        with self._locks[kind]:
            # Un'altra richiesta potrebbe aver appena ricostruito la snapshot
            if not force_refresh:
                snapshot = self._snapshots.get(kind)
                if self._is_fresh(snapshot, self._clock()):
                    return snapshot.entries
            return self._rebuild(kind).entries

    def _rebuild(self, kind: CatalogKind) -> CatalogSnapshot:
        generation = self._generations[kind]
        logger.info("Caricamento catalogo '%s' in cache...", kind.value)
        started = time.perf_counter()
        entries = tuple(self._loader(kind))
        snapshot = CatalogSnapshot(kind=kind, entries=entries, built_at=self._clock())

        with self._publish_locks[kind]:
            published = self._generations[kind] == generation
            if published:
                self._snapshots[kind] = snapshot
        if not published:
            # invalidate() arrivato durante il caricamento: la prossima get rilegge
            logger.info("Catalogo '%s' invalidato durante il caricamento, snapshot non pubblicata", kind.value)

        logger.info(
            "Catalogo '%s': %d modelli caricati in %.0fms (TTL %.0fh)",
            kind.value,
            len(entries),
            (time.perf_counter() - started) * 1000,
            self.ttl_seconds(kind) / 3600,
        )
        return snapshot

    def invalidate(self, kind: CatalogKind) -> None:
        """Scarta la snapshot: la prossima ``get`` ricostruisce a prescindere dal TTL."""
        with self._publish_locks[kind]:
            self._generations[kind] += 1
            self._snapshots.pop(kind, None)
        logger.info("Cache catalogo '%s' invalidata", kind.value)


def build_catalog_cache(
    session_factory: Callable[[], AbstractContextManager[Session]],
    ttls: Mapping[CatalogKind, timedelta] | None = None,
) -> CatalogCache:
    """Collega la cache al DB tramite una factory di sessioni (es. ``session_scope``)."""

    def _load(kind: CatalogKind) -> list[DerivedEntry]:
        with session_factory() as session:
            return load_catalog_entries(session, kind)

    return CatalogCache(loader=_load, ttls=ttls)


__all__ = [
    "CatalogCache",
    "CatalogLoader",
    "CatalogSnapshot",
    "build_catalog_cache",
    "default_ttls",
    "load_catalog_entries",
]
