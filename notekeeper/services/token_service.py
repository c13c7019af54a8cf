"""
Creación y verificación de access tokens (JWT firmados, sin estado en servidor).
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import uuid4

import jwt as pyjwt

from notekeeper.core.config import settings
from notekeeper.core.exceptions import ExpiredTokenError, InvalidTokenError


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _secret() -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET no configurado")
    return settings.jwt_secret


def create_access_token(*, user: Dict[str, Any], expires_in_minutes: int | None = None) -> str:
    """
    Genera un JWT válido por ACCESS_TOKEN_EXPIRE_MINUTES (o `expires_in_minutes`).
    Claims: sub(user_id), token_version, iat, exp, jti.
    """
    now = _now_utc()
    mins = expires_in_minutes if expires_in_minutes is not None else settings.access_token_expire_minutes
    exp = now + timedelta(minutes=mins)
    payload = {
        "sub": str(user["_id"]),
        "token_version": user.get("token_version", 0),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": str(uuid4()),
    }
    return pyjwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decodifica y valida firma/expiración. Devuelve payload.

    Levanta ExpiredTokenError si venció e InvalidTokenError ante cualquier otro problema.
    """
    try:
        payload = pyjwt.decode(
            token,
            key=_secret(),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except pyjwt.ExpiredSignatureError:
        raise ExpiredTokenError() from None
    except pyjwt.InvalidTokenError:
        raise InvalidTokenError() from None
    if not payload.get("sub"):
        raise InvalidTokenError()
    return payload
