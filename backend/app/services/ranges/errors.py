"""Eccezioni applicative del sottosistema range analysis.

Ogni classe porta lo status HTTP con cui le route la traducono.
"""
from __future__ import annotations

from typing import Any


class RangeServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_detail(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(RangeServiceError):
    """Input mancante o malformato: nessun effetto collaterale è avvenuto."""

    status_code = 400


class NotFoundError(RangeServiceError):
    status_code = 404


class ForbiddenError(RangeServiceError):
    status_code = 403


class ConflictError(RangeServiceError):
    """Creazione Range persa contro un writer concorrente (gestita internamente)."""

    status_code = 409


class ConcurrentModificationError(RangeServiceError):
    """L'assignment è stato modificato da un'altra richiesta durante il salvataggio."""

    status_code = 409


class UpstreamEmptyError(RangeServiceError):
    """Catalogo vuoto: serve una sincronizzazione prima dell'analisi."""

    status_code = 400


class RangeResolutionError(RangeServiceError):
    """Impossibile ottenere il Range per un singolo nome modello."""

    status_code = 500


__all__ = [
    "RangeServiceError",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "ConcurrentModificationError",
    "UpstreamEmptyError",
    "RangeResolutionError",
]
