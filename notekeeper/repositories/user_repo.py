"""Repo de la colección `user`.

- `email` se guarda tal cual llega (sensible a mayúsculas).
- Unicidad: consulta previa + índice `uniq_email`; un duplicado se reporta como ConflictError.
- Timestamps en ISO-8601 UTC (Z).
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from notekeeper.core.async_utils import with_timeout
from notekeeper.core.exceptions import ConflictError
from notekeeper.infrastructure.db.mongo_async import get_async_db
from notekeeper.repositories._ids import to_object_id

COLLECTION = "user"


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def insert_user(*, full_name: str, email: str, password_hash: str) -> Dict[str, Any]:
    """Inserta usuario y devuelve el documento con `_id`.

    La consulta previa cubre el caso sin índice (bootstrap omitido); el índice
    único cierra la carrera entre registros concurrentes.
    """
    if await find_user_by_email(email):
        raise ConflictError("User already exists")
    doc = {
        "full_name": full_name,
        "email": email,
        "password_hash": password_hash,
        "token_version": 0,
        "created_on": _now_iso(),
    }
    try:
        await with_timeout(get_async_db()[COLLECTION].insert_one(doc), op="user.insert")
    except DuplicateKeyError:
        raise ConflictError("User already exists") from None
    return doc


async def find_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return await with_timeout(get_async_db()[COLLECTION].find_one({"email": email}), op="user.find")


async def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    """Obtiene usuario por id (str); None si el id no es válido o no existe."""
    oid = to_object_id(user_id)
    if oid is None:
        return None
    return await with_timeout(get_async_db()[COLLECTION].find_one({"_id": oid}), op="user.get")


async def increment_token_version(user_id: str) -> bool:
    """Incrementa token_version (invalidando access tokens previos)."""
    oid = to_object_id(user_id)
    if oid is None:
        return False
    res = await with_timeout(
        get_async_db()[COLLECTION].update_one({"_id": oid}, {"$inc": {"token_version": 1}}),
        op="user.revoke",
    )
    return res.matched_count > 0
