import logging

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from app.db import models  # noqa: F401  registra tutte le tabelle nel metadata
from app.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Crea tutte le tabelle e applica gli aggiornamenti necessari."""
    SQLModel.metadata.create_all(engine)
    _healthcheck()
    _ensure_assignment_columns()


def _ensure_assignment_columns() -> None:
    """Aggiunge le colonne introdotte dopo il primo deploy sulla tabella assignment."""
    inspector = inspect(engine)
    tables = inspector.get_table_names()
    if "assignment" not in tables:
        return

    existing = {column["name"] for column in inspector.get_columns("assignment")}
    columns = [
        ("category_id", "INTEGER", None),
        ("version", "INTEGER", "1"),
    ]
    with engine.begin() as connection:
        for name, column_type, default in columns:
            if name in existing:
                continue
            ddl = f"ALTER TABLE assignment ADD COLUMN {name} {column_type}"
            if default is not None:
                ddl += f" DEFAULT {default}"
            try:
                connection.execute(text(ddl))
                logger.info("Added missing column '%s' to assignment table.", name)
            except SQLAlchemyError as exc:  # pragma: no cover - best effort
                logger.warning("Unable to add column '%s' to assignment: %s", name, exc)


def _healthcheck() -> None:
    """Verifica la raggiungibilità del DB."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:  # pragma: no cover - best effort
        logger.error("Database healthcheck failed: %s", exc)
