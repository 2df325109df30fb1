from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core import settings

logger = logging.getLogger(__name__)


def _payload_too_large() -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"detail": f"Payload troppo grande (>{settings.max_request_body_mb}MB)"},
    )


async def request_limits_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable],
):
    """
    Middleware globale che:
    - limita la dimensione del payload
    - registra metodo, path, status e durata delle chiamate API v1
    """
    max_bytes = settings.max_request_body_mb * 1024 * 1024

    content_length = request.headers.get("content-length")
    if content_length:
        try:
            if int(content_length) > max_bytes:
                return _payload_too_large()
        except ValueError:
            # content-length non valido: si controlla il body reale
            pass

    # Il body si legge una sola volta e resta disponibile alle route
    body = await request.body()
    if len(body) > max_bytes:
        return _payload_too_large()
    request._body = body  # type: ignore[attr-defined]

    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        if request.url.path.startswith(settings.api_v1_prefix):
            logger.info(
                "%s %s -> %s (%.0fms)",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
            )


__all__ = ["request_limits_middleware"]
