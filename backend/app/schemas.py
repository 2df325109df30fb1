from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.catalog.models import DeviceKind, SearchType


class CamelRequest(BaseModel):
    """Body in ingresso: accetta sia camelCase (frontend) sia snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=()
    )


# ---------------------------------------------------------------------------
# Catalogo modelli
# ---------------------------------------------------------------------------


class VehicleModelSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    make: str
    model: str
    full_name: str
    years: Optional[list[str]] = None
    ebay_category_id: Optional[str] = None
    source: str


class DeviceModelSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    brand: str
    model: str
    device_kind: DeviceKind
    ebay_category_id: Optional[str] = None


class VehicleModelListResponse(BaseModel):
    success: bool = True
    count: int
    models: list[VehicleModelSchema]


class DeviceModelListResponse(BaseModel):
    success: bool = True
    count: int
    models: list[DeviceModelSchema]


class VehicleModelImportRow(CamelRequest):
    make: str
    model: str
    full_name: Optional[str] = None
    years: Optional[list[str]] = None
    ebay_category_id: Optional[str] = None
    source: str = "ebay-api"


class DeviceModelImportRow(CamelRequest):
    full_name: str
    device_kind: DeviceKind
    brand: Optional[str] = None
    model: Optional[str] = None
    ebay_category_id: Optional[str] = None


class VehicleModelImportRequest(CamelRequest):
    models: list[VehicleModelImportRow]


class DeviceModelImportRequest(CamelRequest):
    models: list[DeviceModelImportRow]


class CatalogImportStatsSchema(BaseModel):
    added: int
    updated: int
    skipped: int
    errors: int
    total_in_database: int


class CatalogImportResponse(BaseModel):
    success: bool = True
    message: str
    stats: CatalogImportStatsSchema


# ---------------------------------------------------------------------------
# Analisi testo
# ---------------------------------------------------------------------------


class AnalyzeRequest(CamelRequest):
    text_to_analyze: Optional[str] = None
    search_type: SearchType = SearchType.vehicles
    category_id: Optional[int] = None


class LineResultSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_number: int
    text: str
    found_model: Optional[str] = None
    primary_attribute: Optional[str] = None
    secondary_attribute: Optional[str] = None
    device_kind: Optional[DeviceKind] = None


class MatchedRowSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_number: int
    text: str


class ModelAggregateSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    model_name: str
    count: int
    matched_line_numbers: list[int]
    matched_rows: list[MatchedRowSchema]


class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool = True
    search_type: SearchType
    found_in_database: list[ModelAggregateSchema]
    line_results: list[LineResultSchema]
    total_models_in_database: int
    catalog_models_count: int
    existing_ranges_count: int
    total_lines_analyzed: int
    total_match_count: int
    unmatched_count: int
    unmatched_lines: list[LineResultSchema]
    unique_models_found: int
    processing_time_ms: int


# ---------------------------------------------------------------------------
# Range e allocazione
# ---------------------------------------------------------------------------


class ModelCountPayload(CamelRequest):
    model_name: Optional[str] = None
    count: Optional[int] = None


class MapToRangesRequest(CamelRequest):
    category_id: Optional[int] = None
    model_counts: Optional[list[ModelCountPayload]] = None


class RangeQuantitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    range_id: int
    range_name: Optional[str] = None
    quantity: int


class MapToRangesResponse(BaseModel):
    success: bool = True
    range_quantities: list[RangeQuantitySchema]


class EnsureUnknownRangeRequest(CamelRequest):
    category_id: Optional[int] = None


class RangeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class EnsureUnknownRangeResponse(BaseModel):
    success: bool = True
    unknown_range: RangeSchema


class SaveBulkRangesRequest(CamelRequest):
    assignment_id: Optional[int] = None
    category_id: Optional[int] = None
    model_counts: list[ModelCountPayload] = Field(default_factory=list)
    unknown_qty: Optional[int] = 0
    remaining_limit: Optional[int] = Field(
        default=None,
        description="Quantità massima aggiungibile; oltre questo limite le voci vengono tagliate (negativo = tutto tagliato)",
    )


class SaveBulkRangesResponse(BaseModel):
    success: bool = True
    ranges_added: int
    quantity_added: int
    quantity_trimmed: int
    total_distributed: int
    remaining: int


class CompleteRangeRequest(CamelRequest):
    range_id: Optional[int] = None
    quantity: Optional[int] = None


class AssignmentRangeEntrySchema(BaseModel):
    range_id: int
    quantity: int


class AssignmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lister_id: int
    category_id: Optional[int] = None
    quantity: int
    completed_quantity: int
    range_quantities: list[AssignmentRangeEntrySchema]
    version: int
    updated_at: datetime
