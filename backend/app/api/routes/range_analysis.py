import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import (
    CurrentUser,
    DBSession,
    UserRole,
    get_allocation_ledger,
    get_catalog_sync_service,
    get_line_analyzer,
    get_range_resolver,
    require_role,
)
from app.domain.catalog.models import DeviceKind
from app.domain.users.models import LISTING_ROLES
from app.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    CatalogImportResponse,
    CatalogImportStatsSchema,
    DeviceModelImportRequest,
    DeviceModelListResponse,
    DeviceModelSchema,
    EnsureUnknownRangeRequest,
    EnsureUnknownRangeResponse,
    MapToRangesRequest,
    MapToRangesResponse,
    ModelCountPayload,
    RangeQuantitySchema,
    RangeSchema,
    SaveBulkRangesRequest,
    SaveBulkRangesResponse,
    VehicleModelImportRequest,
    VehicleModelListResponse,
    VehicleModelSchema,
)
from app.services.catalog_sync import (
    CatalogSyncService,
    list_device_models,
    list_vehicle_models,
)
from app.services.ranges import (
    AllocationLedger,
    LineAnalyzer,
    ModelCount,
    RangeResolver,
)
from app.services.ranges.errors import RangeServiceError, ValidationError

logger = logging.getLogger(__name__)

# Lettura cataloghi: qualunque utente autenticato
router = APIRouter()
listing_guard = require_role(LISTING_ROLES)
superadmin_guard = require_role([UserRole.superadmin])

AnalyzerDep = Annotated[LineAnalyzer, Depends(get_line_analyzer)]
ResolverDep = Annotated[RangeResolver, Depends(get_range_resolver)]
LedgerDep = Annotated[AllocationLedger, Depends(get_allocation_ledger)]
SyncServiceDep = Annotated[CatalogSyncService, Depends(get_catalog_sync_service)]


def _raise_http(exc: RangeServiceError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc


def _model_counts(payload: Optional[list[ModelCountPayload]]) -> list[ModelCount]:
    return [
        ModelCount(model_name=(item.model_name or "").strip(), count=item.count or 0)
        for item in (payload or [])
    ]


@router.get("/ebay-models", response_model=VehicleModelListResponse)
def get_vehicle_models(session: DBSession, _user: CurrentUser) -> VehicleModelListResponse:
    models = list_vehicle_models(session)
    return VehicleModelListResponse(
        count=len(models),
        models=[VehicleModelSchema.model_validate(record) for record in models],
    )


@router.get("/device-models", response_model=DeviceModelListResponse)
def get_device_models(
    session: DBSession,
    _user: CurrentUser,
    device_kind: Optional[DeviceKind] = Query(default=None),
) -> DeviceModelListResponse:
    models = list_device_models(session, device_kind)
    return DeviceModelListResponse(
        count=len(models),
        models=[DeviceModelSchema.model_validate(record) for record in models],
    )


@router.post(
    "/import-vehicle-models",
    response_model=CatalogImportResponse,
    dependencies=[superadmin_guard],
)
def import_vehicle_models(
    payload: VehicleModelImportRequest,
    session: DBSession,
    service: SyncServiceDep,
) -> CatalogImportResponse:
    stats = service.import_vehicle_models(session, payload.models)
    return CatalogImportResponse(
        message=f"Imported {stats.added} new vehicle models, updated {stats.updated}",
        stats=CatalogImportStatsSchema(**vars(stats)),
    )


@router.post(
    "/import-device-models",
    response_model=CatalogImportResponse,
    dependencies=[superadmin_guard],
)
def import_device_models(
    payload: DeviceModelImportRequest,
    session: DBSession,
    service: SyncServiceDep,
) -> CatalogImportResponse:
    stats = service.import_device_models(session, payload.models)
    return CatalogImportResponse(
        message=f"Imported {stats.added} new device models, updated {stats.updated}",
        stats=CatalogImportStatsSchema(**vars(stats)),
    )


@router.post("/analyze", response_model=AnalyzeResponse, dependencies=[listing_guard])
def analyze_text(
    payload: AnalyzeRequest,
    session: DBSession,
    analyzer: AnalyzerDep,
) -> AnalyzeResponse:
    try:
        result = analyzer.analyze(
            session,
            payload.text_to_analyze,
            search_type=payload.search_type,
            category_id=payload.category_id,
        )
    except RangeServiceError as exc:
        _raise_http(exc)
    return AnalyzeResponse.model_validate(result)


@router.post("/map-to-ranges", response_model=MapToRangesResponse, dependencies=[listing_guard])
def map_to_ranges(
    payload: MapToRangesRequest,
    session: DBSession,
    resolver: ResolverDep,
) -> MapToRangesResponse:
    if payload.category_id is None:
        _raise_http(ValidationError("categoryId is required"))
    if payload.model_counts is None:
        _raise_http(ValidationError("modelCounts must be an array"))

    resolved = resolver.map_to_ranges(
        session, payload.category_id, _model_counts(payload.model_counts)
    )
    return MapToRangesResponse(
        range_quantities=[
            RangeQuantitySchema(
                range_id=item.range_id, range_name=item.range_name, quantity=item.quantity
            )
            for item in resolved
        ]
    )


@router.post(
    "/ensure-unknown-range",
    response_model=EnsureUnknownRangeResponse,
    dependencies=[listing_guard],
)
def ensure_unknown_range(
    payload: EnsureUnknownRangeRequest,
    session: DBSession,
    resolver: ResolverDep,
) -> EnsureUnknownRangeResponse:
    if payload.category_id is None:
        _raise_http(ValidationError("categoryId is required"))
    try:
        record = resolver.ensure_unknown_range(session, payload.category_id)
    except RangeServiceError as exc:
        _raise_http(exc)
    return EnsureUnknownRangeResponse(unknown_range=RangeSchema.model_validate(record))


@router.post(
    "/save-bulk-ranges",
    response_model=SaveBulkRangesResponse,
    dependencies=[listing_guard],
)
def save_bulk_ranges(
    payload: SaveBulkRangesRequest,
    session: DBSession,
    ledger: LedgerDep,
    current_user: CurrentUser,
) -> SaveBulkRangesResponse:
    try:
        result = ledger.apply_bulk(
            session,
            assignment_id=payload.assignment_id,
            category_id=payload.category_id,
            model_counts=_model_counts(payload.model_counts),
            unknown_qty=payload.unknown_qty,
            remaining_limit=payload.remaining_limit,
            caller=current_user,
        )
    except RangeServiceError as exc:
        _raise_http(exc)
    return SaveBulkRangesResponse(
        ranges_added=result.ranges_added,
        quantity_added=result.quantity_added,
        quantity_trimmed=result.quantity_trimmed,
        total_distributed=result.total_distributed,
        remaining=result.remaining,
    )


__all__ = ["router"]
