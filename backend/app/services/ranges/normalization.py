"""
Normalizzazione testo per il matching dei nomi modello.

Due forme convivono e vanno confrontate separatamente:

- ``normalize_text`` (aggressiva): lowercase senza trattini, underscore e
  spazi. "Ford F-250" -> "fordf250".
- ``normalize_lower`` (leggera): lowercase con spazi compattati, usata per i
  nomi Range storici. "Ford  F-250" -> "ford f-250".
"""
from __future__ import annotations

import re

# Trattini unicode (U+2010..U+2015, U+2212) trattati come "-"
_AGGRESSIVE_STRIP = re.compile(r"[-_\s\u2010-\u2015\u2212]+")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Forma aggressiva per il containment sul nome completo."""
    if not text:
        return ""
    return _AGGRESSIVE_STRIP.sub("", text.lower()).strip()


def normalize_lower(text: str | None) -> str:
    """Forma leggera: lowercase, spazi multipli compattati, trim."""
    if not text:
        return ""
    return _WHITESPACE_RUN.sub(" ", text.lower()).strip()


__all__ = ["normalize_lower", "normalize_text"]
