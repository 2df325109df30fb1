"""
Range analysis - matching dei modelli catalogo e ledger delle quantità per range.

Struttura:
- normalization: forme di confronto (aggressiva e leggera)
- entries: forme derivate delle voci catalogo/range
- cache: snapshot in memoria dei cataloghi con TTL e invalidazione
- matcher: miglior match per riga (posizione, poi lunghezza)
- analyzer: analisi testo riga per riga e aggregazione per modello
- resolver: nome modello -> Range, creazione race-safe
- ledger: allocazione con limite residuo e salvataggio atomico sull'assignment
"""
from .analyzer import AnalysisResult, LineAnalyzer, analyze_lines, split_lines
from .cache import CatalogCache, CatalogSnapshot, build_catalog_cache, load_catalog_entries
from .entries import DerivedEntry, DeviceEntry, RangeEntry, VehicleEntry
from .ledger import (
    AllocationLedger,
    BulkAllocationResult,
    RangeQuantityView,
    allocate_within_budget,
    merge_range_quantities,
)
from .matcher import find_best_hit, find_best_match
from .normalization import normalize_lower, normalize_text
from .resolver import CreateStatus, ModelCount, RangeResolver, ResolvedRange
from . import errors

__all__ = [
    "AllocationLedger",
    "AnalysisResult",
    "BulkAllocationResult",
    "CatalogCache",
    "CatalogSnapshot",
    "CreateStatus",
    "DerivedEntry",
    "DeviceEntry",
    "LineAnalyzer",
    "ModelCount",
    "RangeEntry",
    "RangeQuantityView",
    "RangeResolver",
    "ResolvedRange",
    "VehicleEntry",
    "allocate_within_budget",
    "analyze_lines",
    "build_catalog_cache",
    "errors",
    "find_best_hit",
    "find_best_match",
    "load_catalog_entries",
    "merge_range_quantities",
    "normalize_lower",
    "normalize_text",
    "split_lines",
]
