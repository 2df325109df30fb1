from .ranges import (
    AllocationLedger,
    CatalogCache,
    LineAnalyzer,
    RangeResolver,
    build_catalog_cache,
)
from .catalog_sync import CatalogImportStats, CatalogSyncService

__all__ = [
    "AllocationLedger",
    "CatalogCache",
    "CatalogImportStats",
    "CatalogSyncService",
    "LineAnalyzer",
    "RangeResolver",
    "build_catalog_cache",
]
