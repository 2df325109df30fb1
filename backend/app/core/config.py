from pathlib import Path
import sys

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_storage_root() -> Path:
    """Return the storage folder depending on the runtime (source vs PyInstaller)."""
    if getattr(sys, "frozen", False):
        # When bundled with PyInstaller, keep data next to the executable.
        return Path(sys.executable).resolve().parent / "storage"
    return Path(__file__).resolve().parent.parent.parent / "storage"


class Settings(BaseSettings):
    """Configurazione centrale dell'applicazione."""

    app_name: str = "Range Analysis Backend"
    api_v1_prefix: str = "/api/v1"
    debug: bool = False

    # Storage paths / database
    storage_root: Path = _default_storage_root()
    database_path: Path = Path("database.sqlite")
    database_url: str | None = Field(
        default=None,
        description=(
            "SQLAlchemy URL (PostgreSQL raccomandato in produzione per concorrenza)."
        ),
    )
    db_pool_size: int = Field(default=10, description="Pool di connessioni DB (Postgres)")
    db_max_overflow: int = Field(
        default=20, description="Connessioni addizionali consentite oltre il pool"
    )

    cors_origins: list[str] | tuple[str, ...] | str | None = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    cors_allow_credentials: bool = True

    # JWT emessi dal servizio di autenticazione esterno
    jwt_secret_key: str = Field(
        default="change-me",
        description="Chiave segreta condivisa per la verifica dei JWT",
    )
    jwt_algorithm: str = Field(default="HS256", description="Algoritmo JWT")
    access_token_expire_minutes: int = Field(
        default=15,
        description="Durata (minuti) dei token emessi localmente",
    )
    access_token_cookie_name: str = Field(
        default="ro_access_token",
        description="Nome cookie HttpOnly per l'access token (opzionale)",
    )
    max_request_body_mb: int = Field(
        default=20,
        description="Limite dimensione corpo richiesta in MB",
    )

    # Catalog cache / range analysis
    vehicle_cache_ttl_hours: float = Field(
        default=240,
        description="Validità (ore) dello snapshot dei modelli veicolo in memoria",
    )
    device_cache_ttl_hours: float = Field(
        default=240,
        description="Validità (ore) dello snapshot dei modelli telefono/tablet in memoria",
    )
    line_preview_max_chars: int = Field(
        default=200,
        description="Lunghezza massima del testo riga restituito nei risultati di analisi",
    )

    # Logging e observability
    structured_logging: bool = Field(
        default=True,
        description="Emette log JSON per integrazione con SIEM/ELK",
    )
    log_level: str = Field(default="INFO", description="Livello di log applicativo")

    model_config = SettingsConfigDict(
        env_prefix="RANGEOPS_", env_file=".env", extra="ignore"
    )

    @property
    def effective_database_url(self) -> str:
        """Preferisce un URL Postgres fornito via env, con fallback SQLite per sviluppo."""

        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.storage_root / self.database_path}"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(
        cls,
        value: str | list[str] | tuple[str, ...] | None,
    ) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            if not value.strip():
                return []
            return [item.strip() for item in value.split(",") if item.strip()]
        return list(value)


settings = Settings()

# Assicura che la cartella storage esista (per il database SQLite)
settings.storage_root.mkdir(parents=True, exist_ok=True)
