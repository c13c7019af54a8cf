"""
Resolución de identidad para rutas protegidas a partir del header Authorization.

Token ausente, inválido, vencido o revocado producen el mismo UnauthenticatedError.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from notekeeper.core.exceptions import InvalidTokenError, UnauthenticatedError
from notekeeper.repositories import user_repo as repo
from notekeeper.services.token_service import verify_access_token

_log = logging.getLogger("notekeeper.auth")


@dataclass(frozen=True)
class Identity:
    user_id: str


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def authorize(authorization: Optional[str]) -> Identity:
    token = extract_bearer(authorization)
    if not token:
        raise UnauthenticatedError()
    try:
        payload = verify_access_token(token)
    except InvalidTokenError as e:
        _log.debug("token rechazado: %s", e.message)
        raise UnauthenticatedError() from None

    user_id = str(payload["sub"])
    u = await repo.get_user_by_id(user_id)
    if not u or u.get("token_version", 0) != payload.get("token_version", 0):
        _log.debug("token revocado o usuario inexistente id=%s", user_id)
        raise UnauthenticatedError()
    return Identity(user_id=user_id)
