from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import CurrentUser, DBSession, UserRole, get_allocation_ledger, require_role
from app.schemas import AssignmentSchema, CompleteRangeRequest, RangeQuantitySchema
from app.services.ranges import AllocationLedger
from app.services.ranges.errors import RangeServiceError

router = APIRouter(
    dependencies=[require_role([UserRole.superadmin, UserRole.listingadmin, UserRole.lister])]
)

LedgerDep = Annotated[AllocationLedger, Depends(get_allocation_ledger)]


@router.get("/{assignment_id}/ranges", response_model=list[RangeQuantitySchema])
def list_assignment_ranges(
    assignment_id: int,
    session: DBSession,
    ledger: LedgerDep,
    current_user: CurrentUser,
) -> list[RangeQuantitySchema]:
    try:
        entries = ledger.list_range_quantities(
            session, assignment_id=assignment_id, caller=current_user
        )
    except RangeServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc
    return [RangeQuantitySchema.model_validate(entry) for entry in entries]


@router.post("/{assignment_id}/complete-range", response_model=AssignmentSchema)
def complete_range(
    assignment_id: int,
    payload: CompleteRangeRequest,
    session: DBSession,
    ledger: LedgerDep,
    current_user: CurrentUser,
) -> AssignmentSchema:
    """Imposta la quantità completata per un singolo range dell'assignment."""
    try:
        assignment = ledger.set_range_quantity(
            session,
            assignment_id=assignment_id,
            range_id=payload.range_id,
            quantity=payload.quantity,
            caller=current_user,
        )
    except RangeServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc
    return AssignmentSchema.model_validate(assignment)


__all__ = ["router"]
