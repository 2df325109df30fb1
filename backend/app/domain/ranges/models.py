"""Range domain models."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


UNKNOWN_RANGE_NAME = "Unknown"
"""Bucket riservato per le righe che non corrispondono a nessun modello."""


class Range(SQLModel, table=True):
    """Bucket nominato per categoria, usato per contare gli articoli per modello.

    L'unicità (category_id, name) è garantita dal vincolo del DB: è il vincolo
    a decidere chi vince quando due richieste creano lo stesso range.
    """

    __tablename__ = "range"
    __table_args__ = (
        UniqueConstraint(
            "category_id",
            "name",
            name="uq_range_category_name",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    category_id: int = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
