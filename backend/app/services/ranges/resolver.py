"""Risoluzione nome modello -> Range persistente, con creazione race-safe.

L'unicità (category_id, name) è del DB. La create restituisce un esito
esplicito invece di lasciar salire l'errore del driver: su ``conflict`` il
resolver rilegge una sola volta, un secondo fallimento è un errore vero.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.domain.ranges.models import UNKNOWN_RANGE_NAME, Range

from .errors import ConflictError, RangeResolutionError, RangeServiceError, ValidationError

logger = logging.getLogger(__name__)


class CreateStatus(str, Enum):
    created = "created"
    conflict = "conflict"


@dataclass(frozen=True)
class RangeCreateResult:
    status: CreateStatus
    range: Optional[Range] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ModelCount:
    model_name: str
    count: int


@dataclass(frozen=True)
class ResolvedRange:
    range_id: int
    range_name: str
    quantity: int


def find_range(session: Session, name: str, category_id: int) -> Range | None:
    statement = select(Range).where(Range.name == name, Range.category_id == category_id)
    return session.exec(statement).first()


def create_range(session: Session, name: str, category_id: int) -> RangeCreateResult:
    """Inserisce il Range nella sua transazione; la violazione di unicità è un esito, non un'eccezione."""
    record = Range(name=name, category_id=category_id)
    session.add(record)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        conflict = ConflictError(f"Range '{name}' already exists", range_name=name)
        conflict.__cause__ = exc
        return RangeCreateResult(status=CreateStatus.conflict, error=conflict)
    session.refresh(record)
    return RangeCreateResult(status=CreateStatus.created, range=record)


class RangeResolver:

    def resolve(self, session: Session, name: str, category_id: int) -> Range:
        if not name or not name.strip():
            raise ValidationError("modelName is required")

        existing = find_range(session, name, category_id)
        if existing is not None:
            return existing

        outcome = create_range(session, name, category_id)
        if outcome.status is CreateStatus.created:
            logger.info("Creato nuovo range '%s' (categoria %s)", name, category_id)
            return outcome.range

        logger.info(
            "Range '%s' creato da una richiesta concorrente (categoria %s), rilettura",
            name,
            category_id,
        )
        winner = find_range(session, name, category_id)
        if winner is None:
            raise RangeResolutionError(
                f"Range '{name}' not found after creation conflict",
                range_name=name,
            )
        return winner

    def ensure_unknown_range(self, session: Session, category_id: int) -> Range:
        return self.resolve(session, UNKNOWN_RANGE_NAME, category_id)

    def map_to_ranges(
        self,
        session: Session,
        category_id: int,
        model_counts: Iterable[ModelCount],
    ) -> list[ResolvedRange]:
        """Risolve ogni coppia nome/conteggio; gli elementi non validi o in errore sono saltati."""
        resolved: list[ResolvedRange] = []
        for item in model_counts:
            if not item.model_name or item.count is None or item.count <= 0:
                continue
            try:
                record = self.resolve(session, item.model_name, category_id)
            except (RangeServiceError, SQLAlchemyError) as exc:
                session.rollback()
                logger.error("Errore creazione range '%s': %s", item.model_name, exc)
                continue
            resolved.append(
                ResolvedRange(range_id=record.id, range_name=record.name, quantity=item.count)
            )
        return resolved


__all__ = [
    "CreateStatus",
    "ModelCount",
    "RangeCreateResult",
    "RangeResolver",
    "ResolvedRange",
    "create_range",
    "find_range",
]
