"""Configurazione logging applicativo (testo semplice o JSON per SIEM/ELK)."""
from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import sys

from app.core import settings

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Serializza ogni record come una riga JSON, inclusi gli ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: str | None = None, structured: bool | None = None) -> None:
    """Installa (o sostituisce) l'handler applicativo sul root logger."""
    level_name = (level or settings.log_level or "INFO").upper()
    use_json = settings.structured_logging if structured is None else structured

    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_app_handler", False):
            root.removeHandler(existing)
    handler._app_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level_name)

    # uvicorn duplica gli access log se propagati con il nostro handler
    logging.getLogger("uvicorn.access").propagate = False


__all__ = ["JsonFormatter", "configure_logging"]
