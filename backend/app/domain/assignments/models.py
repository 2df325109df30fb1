"""Assignment domain models."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel


class Assignment(SQLModel, table=True):
    """Unità di lavoro di listing con quantità obiettivo e ripartizione per range.

    ``range_quantities`` è una lista ``[{"range_id": int, "quantity": int}]``
    con al più una voce per range. Le modifiche passano solo dal ledger di
    allocazione, che scrive lista, ``completed_quantity`` e ``version`` in un
    unico UPDATE condizionato.
    """

    __tablename__ = "assignment"

    id: Optional[int] = Field(default=None, primary_key=True)
    lister_id: int = Field(foreign_key="app_user.id", index=True)
    category_id: Optional[int] = Field(
        default=None,
        index=True,
        description="Categoria del task collegato (denormalizzata dal servizio task)",
    )
    quantity: int = Field(ge=1, description="Quantità obiettivo")
    completed_quantity: int = Field(default=0, ge=0)
    range_quantities: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    version: int = Field(default=1, description="Contatore per concorrenza ottimistica")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
