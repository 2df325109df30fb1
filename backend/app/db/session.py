from contextlib import contextmanager
from typing import Generator

from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, create_engine

from app.core import settings


def build_engine(database_url: str) -> Engine:
    """Crea l'engine condiviso applicando i parametri per backend (SQLite/Postgres)."""
    url = make_url(database_url)
    connect_args: dict = {}
    engine_kwargs = {
        "echo": settings.debug,
        "pool_pre_ping": True,
    }

    if url.get_backend_name().startswith("sqlite"):
        # Timeout alto: le create di Range concorrenti si serializzano sul lock di scrittura
        connect_args = {"check_same_thread": False, "timeout": 60}
    else:
        engine_kwargs.update(
            {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
            }
        )

    new_engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)

    # WAL per SQLite su file: letture dell'analisi non bloccano i salvataggi bulk
    if url.get_backend_name().startswith("sqlite") and url.database not in (None, "", ":memory:"):
        with new_engine.begin() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL")
    return new_engine


engine = build_engine(settings.effective_database_url)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager esplicito per operazioni di servizio (es. reload della cache)."""
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
