import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import api_router
from app.api.middleware import request_limits_middleware
from app.core import settings
from app.core.logging import configure_logging
from app.db import init_db
from app.db.session import session_scope
from app.services.ranges import build_catalog_cache

logger = logging.getLogger(__name__)

# Carica variabili .env una sola volta all'import del modulo
load_dotenv(Path(__file__).parent.parent / ".env")


def _build_cors_origins() -> list[str]:
    """
    Normalizza e applica politiche di sicurezza CORS in modo centralizzato.
    """
    allowed_origins = settings.cors_origins or []

    if isinstance(allowed_origins, str):
        allowed_origins = [allowed_origins]

    # SECURITY: rimuovi qualsiasi "*"
    allowed_origins = [origin for origin in allowed_origins if origin != "*"]

    if not allowed_origins:
        allowed_origins = [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]

    return allowed_origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: logging, tabelle DB. La cache cataloghi si popola alla prima analisi."""
    configure_logging()
    init_db()
    logger.info("%s avviato", settings.app_name)

    yield


def create_app() -> FastAPI:
    """
    Factory dell'app FastAPI.

    I router stanno in app.api.routes, i modelli SQLModel in app.domain (riesportati
    da app.db.models) e la logica di analisi/allocazione in app.services.ranges.
    La cache dei cataloghi è una per processo e vive in ``app.state``.
    """
    application = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,   # SECURITY: Swagger solo in debug
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    application.state.catalog_cache = build_catalog_cache(session_scope)

    application.include_router(api_router)

    application.middleware("http")(request_limits_middleware)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_build_cors_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    return application


app = create_app()
