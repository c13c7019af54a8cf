"""
Lógica de autenticación: registro, login, perfil y revocación de sesiones.
"""
import logging
from typing import Any, Dict

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

from notekeeper.core.async_utils import run_sync
from notekeeper.core.config import settings
from notekeeper.core.exceptions import (
    InvalidCredentialsError,
    UnauthorizedError,
    UnknownUserError,
    ValidationError,
)
from notekeeper.repositories import user_repo as repo

_log = logging.getLogger("notekeeper.auth")

ph = PasswordHasher(
    time_cost=settings.password_hash_time_cost,
    memory_cost=settings.password_hash_memory_cost,
    parallelism=settings.password_hash_parallelism,
    hash_len=32,
    salt_len=16,
    type=Type.ID,
)


def _verify(password_hash: str, password: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


async def hash_password(password: str) -> str:
    return await run_sync(ph.hash, password, op="password.hash")


async def verify_password(password: str, password_hash: str) -> bool:
    return await run_sync(_verify, password_hash, password, op="password.verify")


async def register_user(*, full_name: str | None, email: str | None, password: str | None) -> Dict[str, Any]:
    """
    Registra un usuario local y devuelve su documento.

    - Todos los campos son obligatorios (no vacíos).
    - El email duplicado lo detecta el índice único al insertar (ConflictError).
    """
    if not full_name or not email or not password:
        raise ValidationError("All fields are required")
    password_hash = await hash_password(password)
    user = await repo.insert_user(full_name=full_name, email=email, password_hash=password_hash)
    _log.info("usuario registrado id=%s", user["_id"])
    return user


async def authenticate_user(*, email: str | None, password: str | None) -> Dict[str, Any]:
    """Valida credenciales locales; devuelve el usuario si coinciden."""
    if not email or not password:
        raise ValidationError("Email and Password are required.")
    u = await repo.find_user_by_email(email)
    if not u:
        raise UnknownUserError()
    if not u.get("password_hash") or not await verify_password(password, u["password_hash"]):
        _log.info("login rechazado id=%s", u["_id"])
        raise InvalidCredentialsError()
    return u


def public_user(u: Dict[str, Any]) -> Dict[str, Any]:
    """Vista redactada del usuario (nunca incluye password_hash)."""
    return {
        "_id": str(u["_id"]),
        "fullName": u.get("full_name"),
        "email": u.get("email"),
        "createdOn": u.get("created_on"),
    }


async def get_profile(user_id: str) -> Dict[str, Any]:
    u = await repo.get_user_by_id(user_id)
    if not u:
        raise UnauthorizedError()
    return public_user(u)


async def logout_all(user_id: str) -> None:
    """Revoca todos los access tokens emitidos (incrementa token_version)."""
    if not await repo.increment_token_version(user_id):
        raise UnauthorizedError()
    _log.info("sesiones revocadas id=%s", user_id)
