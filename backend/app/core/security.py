from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
import uuid

from jose import JWTError, jwt

from app.core import settings


class InvalidTokenError(Exception):
    """Eccezione applicativa per token non valido o scaduto."""


def _build_payload(subject: str, role: str, expires_delta: timedelta) -> Dict[str, Any]:
    expire = datetime.now(timezone.utc) + expires_delta
    return {
        "sub": subject,
        "role": role,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    }


def create_access_token(*, subject: str, role: str, expires_minutes: int | None = None) -> str:
    """Firma un access token con la chiave condivisa con il servizio di autenticazione.

    I token degli utenti sono emessi dal servizio esterno; questa funzione serve
    per chiamate service-to-service e per i test.
    """
    expire_minutes = expires_minutes or settings.access_token_expire_minutes
    payload = _build_payload(
        subject=subject,
        role=role,
        expires_delta=timedelta(minutes=expire_minutes),
    )
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
