"""Ledger di allocazione: quantità per range sugli assignment.

Ogni chiamata legge l'assignment, calcola la nuova lista ``range_quantities``
e la scrive con un solo UPDATE condizionato sulla ``version`` letta. Se un'altra
richiesta ha salvato nel frattempo l'UPDATE non tocca righe e la chiamata
fallisce con ``ConcurrentModificationError`` senza sovrascrivere nulla.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
import logging
from typing import Any, Iterable, Sequence

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.domain.assignments.models import Assignment
from app.domain.ranges.models import UNKNOWN_RANGE_NAME, Range
from app.domain.users.models import User

from .errors import (
    ConcurrentModificationError,
    ForbiddenError,
    NotFoundError,
    RangeServiceError,
    ValidationError,
)
from .resolver import ModelCount, RangeResolver, ResolvedRange

logger = logging.getLogger(__name__)


@dataclass
class BulkAllocationResult:
    ranges_added: int
    quantity_added: int
    quantity_trimmed: int
    total_distributed: int
    remaining: int
    applied: list[ResolvedRange] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return self.ranges_added


@dataclass(frozen=True)
class RangeQuantityView:
    range_id: int
    range_name: str | None
    quantity: int


def allocate_within_budget(
    requests: Sequence[ResolvedRange],
    remaining_limit: int | None,
) -> tuple[list[ResolvedRange], int]:
    """Applica il limite residuo in ordine: ogni voce prende ``min(richiesto, budget)``.

    Non è una ripartizione proporzionale: esaurito il budget, le voci successive
    ricevono zero e tutta la loro quantità conta come tagliata.
    """
    total_requested = sum(item.quantity for item in requests)
    if remaining_limit is None or total_requested <= remaining_limit:
        return list(requests), 0

    budget_left = max(0, remaining_limit)
    allocated: list[ResolvedRange] = []
    trimmed = 0
    for item in requests:
        if budget_left <= 0:
            trimmed += item.quantity
            continue
        granted = min(item.quantity, budget_left)
        allocated.append(replace(item, quantity=granted))
        budget_left -= granted
        trimmed += item.quantity - granted
    return allocated, trimmed


def copy_range_quantities(entries: Iterable[dict[str, Any]] | None) -> list[dict[str, int]]:
    return [
        {"range_id": int(entry["range_id"]), "quantity": int(entry.get("quantity") or 0)}
        for entry in (entries or [])
    ]


def merge_range_quantities(
    existing: Iterable[dict[str, Any]] | None,
    deltas: Iterable[ResolvedRange],
) -> list[dict[str, int]]:
    """Somma i delta alle voci già presenti, accodando i range nuovi."""
    merged = copy_range_quantities(existing)
    positions = {entry["range_id"]: index for index, entry in enumerate(merged)}
    for delta in deltas:
        index = positions.get(delta.range_id)
        if index is not None:
            merged[index]["quantity"] += delta.quantity
        else:
            positions[delta.range_id] = len(merged)
            merged.append({"range_id": delta.range_id, "quantity": delta.quantity})
    return merged


def total_distributed(range_quantities: Iterable[dict[str, Any]]) -> int:
    return sum(int(entry.get("quantity") or 0) for entry in range_quantities)


def completed_quantity_for(target: int, range_quantities: Iterable[dict[str, Any]]) -> int:
    return min(target, total_distributed(range_quantities))


class AllocationLedger:

    def __init__(self, resolver: RangeResolver | None = None) -> None:
        self.resolver = resolver or RangeResolver()

    @staticmethod
    def load_for_caller(session: Session, assignment_id: int | None, caller: User) -> Assignment:
        if not assignment_id:
            raise ValidationError("assignmentId is required")
        assignment = session.get(Assignment, assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        if not caller.is_admin and assignment.lister_id != caller.id:
            raise ForbiddenError("Forbidden")
        return assignment

    @staticmethod
    def _persist(
        session: Session,
        assignment: Assignment,
        range_quantities: list[dict[str, int]],
    ) -> int:
        """Scrive lista e completed_quantity in un unico UPDATE condizionato sulla versione."""
        distributed = total_distributed(range_quantities)
        statement = (
            update(Assignment)
            .where(Assignment.id == assignment.id, Assignment.version == assignment.version)
            .values(
                range_quantities=range_quantities,
                completed_quantity=completed_quantity_for(assignment.quantity, range_quantities),
                version=Assignment.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = session.exec(statement)
        if result.rowcount != 1:
            session.rollback()
            logger.warning(
                "Salvataggio range su assignment %s rifiutato: versione %s non più corrente",
                assignment.id,
                assignment.version,
            )
            raise ConcurrentModificationError(
                "Assignment was modified by another request, reload and retry"
            )
        session.commit()
        session.refresh(assignment)
        return distributed

    @staticmethod
    def _range_ids_in_category(
        session: Session, category_id: int, updates: Sequence[ResolvedRange]
    ) -> set[int]:
        if not updates:
            return set()
        statement = select(Range.id).where(
            Range.category_id == category_id,
            Range.id.in_([item.range_id for item in updates]),
        )
        return set(session.exec(statement).all())

    def _resolve_unknown(self, session: Session, category_id: int, unknown_qty: int) -> ResolvedRange | None:
        try:
            unknown = self.resolver.ensure_unknown_range(session, category_id)
        except (RangeServiceError, SQLAlchemyError) as exc:
            session.rollback()
            logger.error("Impossibile ottenere il range Unknown per categoria %s: %s", category_id, exc)
            return None
        return ResolvedRange(range_id=unknown.id, range_name=UNKNOWN_RANGE_NAME, quantity=unknown_qty)

    def apply_bulk(
        self,
        session: Session,
        *,
        assignment_id: int | None,
        category_id: int | None,
        model_counts: Sequence[ModelCount],
        unknown_qty: int | None,
        remaining_limit: int | None,
        caller: User,
    ) -> BulkAllocationResult:
        logger.info(
            "Bulk save: assignment=%s categoria=%s modelli=%d unknown=%s limite=%s",
            assignment_id,
            category_id,
            len(model_counts or []),
            unknown_qty,
            remaining_limit,
        )
        if not assignment_id:
            raise ValidationError("assignmentId is required")
        if category_id is None:
            raise ValidationError("categoryId is required")

        assignment = self.load_for_caller(session, assignment_id, caller)

        updates = self.resolver.map_to_ranges(session, category_id, model_counts or [])
        if unknown_qty and unknown_qty > 0:
            unknown = self._resolve_unknown(session, category_id, unknown_qty)
            if unknown is not None:
                updates.append(unknown)

        valid_ids = self._range_ids_in_category(session, category_id, updates)
        in_category: list[ResolvedRange] = []
        for item in updates:
            if item.range_id not in valid_ids:
                logger.error("Range '%s' non appartiene alla categoria %s, scartato", item.range_name, category_id)
                continue
            in_category.append(item)

        allocated, trimmed = allocate_within_budget(in_category, remaining_limit)
        if trimmed:
            logger.info(
                "Bulk save: richiesti %d, limite residuo %s, tagliati %d",
                sum(item.quantity for item in in_category),
                remaining_limit,
                trimmed,
            )

        # Rilettura: le create dei range hanno fatto commit/rollback e scaduto lo stato
        session.refresh(assignment)
        merged = merge_range_quantities(assignment.range_quantities, allocated)
        distributed = self._persist(session, assignment, merged)

        quantity_added = sum(item.quantity for item in allocated)
        logger.info(
            "Bulk save: %d range (%d pezzi) salvati su assignment %s%s",
            len(allocated),
            quantity_added,
            assignment_id,
            f", tagliati {trimmed}" if trimmed else "",
        )
        return BulkAllocationResult(
            ranges_added=len(allocated),
            quantity_added=quantity_added,
            quantity_trimmed=trimmed,
            total_distributed=distributed,
            remaining=max(0, assignment.quantity - distributed),
            applied=allocated,
        )

    def set_range_quantity(
        self,
        session: Session,
        *,
        assignment_id: int,
        range_id: int | None,
        quantity: int | None,
        caller: User,
    ) -> Assignment:
        """Imposta (non somma) la quantità di un range; ``0`` rimuove la voce."""
        if not range_id or quantity is None or quantity < 0:
            raise ValidationError("rangeId and quantity (>= 0) required")

        assignment = self.load_for_caller(session, assignment_id, caller)
        record = session.get(Range, range_id)
        if record is None:
            raise NotFoundError("Range not found")
        if assignment.category_id is not None and record.category_id != assignment.category_id:
            raise ValidationError("Range does not belong to task category")

        entries = copy_range_quantities(assignment.range_quantities)
        position = next(
            (index for index, entry in enumerate(entries) if entry["range_id"] == range_id),
            None,
        )
        if quantity == 0:
            if position is not None:
                entries.pop(position)
        elif position is not None:
            entries[position]["quantity"] = quantity
        else:
            entries.append({"range_id": range_id, "quantity": quantity})

        self._persist(session, assignment, entries)
        return assignment

    def list_range_quantities(
        self,
        session: Session,
        *,
        assignment_id: int,
        caller: User,
    ) -> list[RangeQuantityView]:
        assignment = self.load_for_caller(session, assignment_id, caller)
        entries = copy_range_quantities(assignment.range_quantities)
        if not entries:
            return []
        names = {
            record.id: record.name
            for record in session.exec(
                select(Range).where(Range.id.in_([entry["range_id"] for entry in entries]))
            ).all()
        }
        return [
            RangeQuantityView(
                range_id=entry["range_id"],
                range_name=names.get(entry["range_id"]),
                quantity=entry["quantity"],
            )
            for entry in entries
        ]


__all__ = [
    "AllocationLedger",
    "BulkAllocationResult",
    "RangeQuantityView",
    "allocate_within_budget",
    "completed_quantity_for",
    "copy_range_quantities",
    "merge_range_quantities",
    "total_distributed",
]
