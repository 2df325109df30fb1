"""
Matching per nome completo tra una riga di testo e i modelli candidati.

Nessun matching sul solo modello: produceva falsi positivi come
"Truck" -> "Chevrolet Truck" o "Touch" -> "UMi Touch".
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import MIN_LOWER_NAME_LENGTH, MIN_NORMALIZED_NAME_LENGTH
from .entries import DerivedEntry


@dataclass(frozen=True)
class MatchHit:
    entry: DerivedEntry
    position: int
    length: int


def _locate(
    entry: DerivedEntry, line_normalized: str, line_lower: str
) -> tuple[int, int] | None:
    """Posizione e lunghezza del containment, provando prima la forma aggressiva."""
    normalized = entry.full_name_normalized
    if normalized and len(normalized) > MIN_NORMALIZED_NAME_LENGTH:
        position = line_normalized.find(normalized)
        if position != -1:
            return position, len(normalized)

    lower = entry.full_name_lower
    if lower and len(lower) > MIN_LOWER_NAME_LENGTH:
        position = line_lower.find(lower)
        if position != -1:
            return position, len(lower)
    return None


def find_best_hit(
    line_normalized: str,
    line_lower: str,
    candidates: Iterable[DerivedEntry],
) -> Optional[MatchHit]:
    """Miglior candidato per la riga: posizione più a sinistra, poi match più lungo.

    Così "Ford F-250" batte "Ford F-2" quando iniziano nello stesso punto.
    A parità di posizione e lunghezza resta il primo candidato incontrato.
    """
    best: MatchHit | None = None
    for entry in candidates:
        located = _locate(entry, line_normalized, line_lower)
        if located is None:
            continue
        position, length = located
        if (
            best is None
            or position < best.position
            or (position == best.position and length > best.length)
        ):
            best = MatchHit(entry=entry, position=position, length=length)
    return best


def find_best_match(
    line_normalized: str,
    line_lower: str,
    candidates: Iterable[DerivedEntry],
) -> Optional[DerivedEntry]:
    hit = find_best_hit(line_normalized, line_lower, candidates)
    return hit.entry if hit else None


__all__ = ["MatchHit", "find_best_hit", "find_best_match"]
