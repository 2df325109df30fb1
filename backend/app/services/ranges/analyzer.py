from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
import time
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core import settings
from app.domain.catalog.models import DeviceKind, SearchType
from app.domain.ranges.models import Range

from .cache import CatalogCache
from .config import LINE_PREVIEW_SUFFIX
from .entries import DerivedEntry, RangeEntry
from .errors import UpstreamEmptyError, ValidationError
from .matcher import find_best_match
from .normalization import normalize_lower, normalize_text

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class PreparedLine:
    line_number: int
    text: str
    lower: str
    normalized: str


@dataclass
class LineResult:
    line_number: int
    text: str
    found_model: Optional[str] = None
    primary_attribute: Optional[str] = None
    secondary_attribute: Optional[str] = None
    device_kind: Optional[DeviceKind] = None


@dataclass
class MatchedRow:
    line_number: int
    text: str


@dataclass
class ModelAggregate:
    model_name: str
    count: int
    matched_rows: list[MatchedRow] = field(default_factory=list)

    @property
    def matched_line_numbers(self) -> list[int]:
        return [row.line_number for row in self.matched_rows]


@dataclass
class LineAnalysis:
    line_results: list[LineResult]
    found_in_database: list[ModelAggregate]
    unmatched_lines: list[LineResult]

    @property
    def total_lines_analyzed(self) -> int:
        return len(self.line_results)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched_lines)

    @property
    def total_match_count(self) -> int:
        return self.total_lines_analyzed - self.unmatched_count


@dataclass
class AnalysisResult(LineAnalysis):
    search_type: SearchType = SearchType.vehicles
    catalog_models_count: int = 0
    existing_ranges_count: int = 0
    processing_time_ms: int = 0

    @property
    def total_models_in_database(self) -> int:
        return self.catalog_models_count + self.existing_ranges_count

    @property
    def unique_models_found(self) -> int:
        return len(self.found_in_database)


def split_lines(text: str) -> list[PreparedLine]:
    """Divide il testo in righe non vuote; i numeri riga restano quelli originali."""
    prepared: list[PreparedLine] = []
    for index, raw in enumerate(_LINE_BREAK.split(text), start=1):
        stripped = raw.strip()
        if not stripped:
            continue
        prepared.append(
            PreparedLine(
                line_number=index,
                text=stripped,
                lower=normalize_lower(stripped),
                normalized=normalize_text(stripped),
            )
        )
    return prepared


def _preview(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + LINE_PREVIEW_SUFFIX


def analyze_lines(
    text: str,
    candidates: Sequence[DerivedEntry],
    preview_limit: int | None = None,
) -> LineAnalysis:
    """Matching riga per riga e aggregazione dei conteggi per modello."""
    limit = preview_limit or settings.line_preview_max_chars
    line_results: list[LineResult] = []
    aggregates: dict[str, ModelAggregate] = {}

    for line in split_lines(text):
        found = find_best_match(line.normalized, line.lower, candidates)
        result = LineResult(line_number=line.line_number, text=_preview(line.text, limit))
        if found is not None:
            result.found_model = found.full_name
            result.primary_attribute = found.primary_attribute
            result.secondary_attribute = found.secondary_attribute
            result.device_kind = found.device_kind
            aggregate = aggregates.setdefault(
                found.full_name, ModelAggregate(model_name=found.full_name, count=0)
            )
            aggregate.count += 1
            aggregate.matched_rows.append(
                MatchedRow(line_number=result.line_number, text=result.text)
            )
        line_results.append(result)

    # sort stabile: a parità di conteggio resta l'ordine di scoperta nel testo
    found_in_database = sorted(aggregates.values(), key=lambda item: item.count, reverse=True)
    unmatched = [result for result in line_results if result.found_model is None]
    return LineAnalysis(
        line_results=line_results,
        found_in_database=found_in_database,
        unmatched_lines=unmatched,
    )


class LineAnalyzer:
    """Analizza testo libero contro catalogo in cache e Range esistenti della categoria."""

    def __init__(self, cache: CatalogCache) -> None:
        self.cache = cache

    def catalog_entries(self, search_type: SearchType) -> list[DerivedEntry]:
        entries = self.cache.get(search_type.catalog_kind)
        device_kind = search_type.device_kind
        if device_kind is None:
            return list(entries)
        return [entry for entry in entries if entry.device_kind == device_kind]

    @staticmethod
    def existing_range_entries(session: Session, category_id: int | None) -> list[RangeEntry]:
        if category_id is None:
            return []
        try:
            ranges = session.exec(select(Range).where(Range.category_id == category_id)).all()
        except SQLAlchemyError as exc:
            logger.error("Lettura range esistenti fallita per categoria %s: %s", category_id, exc)
            return []
        return [RangeEntry.from_range(record) for record in ranges]

    def analyze(
        self,
        session: Session,
        text: str | None,
        search_type: SearchType = SearchType.vehicles,
        category_id: int | None = None,
    ) -> AnalysisResult:
        started = time.perf_counter()
        if not text or not text.strip():
            raise ValidationError("No text provided for analysis.")

        catalog = self.catalog_entries(search_type)
        existing = self.existing_range_entries(session, category_id)
        if category_id is not None:
            logger.info(
                "Analisi: inclusi %d range esistenti per categoria %s (%s)",
                len(existing),
                category_id,
                search_type.value,
            )

        # I range esistenti vanno in testa: a parità di posizione e lunghezza vincono loro
        candidates: list[DerivedEntry] = [*existing, *catalog]
        if not candidates:
            sync_type = search_type.catalog_kind.value
            raise UpstreamEmptyError(
                f"No {sync_type} models in database. Please sync models first.",
                needs_sync=True,
                sync_type=sync_type,
            )

        analysis = analyze_lines(text, candidates)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Analisi: %d righe contro %d modelli %s + %d range esistenti in %dms",
            analysis.total_lines_analyzed,
            len(catalog),
            search_type.value,
            len(existing),
            elapsed_ms,
        )
        return AnalysisResult(
            line_results=analysis.line_results,
            found_in_database=analysis.found_in_database,
            unmatched_lines=analysis.unmatched_lines,
            search_type=search_type,
            catalog_models_count=len(catalog),
            existing_ranges_count=len(existing),
            processing_time_ms=elapsed_ms,
        )


__all__ = [
    "AnalysisResult",
    "LineAnalysis",
    "LineAnalyzer",
    "LineResult",
    "MatchedRow",
    "ModelAggregate",
    "PreparedLine",
    "analyze_lines",
    "split_lines",
]
