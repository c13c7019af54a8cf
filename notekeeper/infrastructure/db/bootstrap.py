"""
Bootstrap de la base Mongo: define y aplica validadores (JSON Schema) e índices.
Se ejecuta al inicio de la app para asegurar colecciones mínimas y consistencia.
No tumba la app si algo falla; deja warnings en casos no críticos.

El índice único `uniq_email` es el que garantiza que dos registros concurrentes
con el mismo email no puedan insertarse ambos.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pymongo.errors import PyMongoError

from notekeeper.infrastructure.db.mongo_async import get_async_db

_log = logging.getLogger("notekeeper.mongo.bootstrap")

USER_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["email", "full_name", "password_hash", "token_version", "created_on"],
    "properties": {
        "email": {"bsonType": "string", "minLength": 1},
        "full_name": {"bsonType": "string", "minLength": 1},
        "password_hash": {"bsonType": "string"},
        "token_version": {"bsonType": "int", "minimum": 0},
        "created_on": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}

NOTE_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["title", "content", "tags", "is_pinned", "user_id", "created_on"],
    "properties": {
        "title": {"bsonType": "string", "minLength": 1},
        "content": {"bsonType": "string", "minLength": 1},
        "tags": {"bsonType": "array", "items": {"bsonType": "string"}},
        "is_pinned": {"bsonType": "bool"},
        "user_id": {"bsonType": "string"},
        "created_on": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}


async def _collmod_or_create(name: str, validator: Dict[str, Any] | None) -> None:
    db = get_async_db()
    try:
        if validator:
            # Intenta aplicar validator con collMod
            await db.command({
                "collMod": name,
                "validator": {"$jsonSchema": validator},
                "validationLevel": "moderate",
            })
        else:
            await db.create_collection(name)
    except PyMongoError:
        # Si collMod falla (no existe la colección), intenta crear con validator
        try:
            if name not in await db.list_collection_names():
                if validator:
                    await db.create_collection(name, validator={"$jsonSchema": validator})
                else:
                    await db.create_collection(name)
        except PyMongoError as e:
            # No aborta el arranque; solo deja sin validator estricto.
            _log.warning("No se pudo aplicar validator en '%s': %s", name, e)


async def _ensure_indexes(name: str, indexes: List[Dict[str, Any]]) -> None:
    coll = get_async_db()[name]
    for ix in indexes:
        ix = dict(ix)
        keys = ix.pop("keys")
        try:
            await coll.create_index(keys, **ix)
        except PyMongoError as e:
            # Datos previos no únicos o índice existente con otras opciones
            _log.warning("No se pudo crear índice en '%s' (%s): %s", name, keys, e)


async def ensure_collections() -> None:
    """
    Garantiza colecciones, validadores e índices mínimos.
    """
    await _collmod_or_create("user", USER_VALIDATOR)
    await _ensure_indexes(
        "user",
        [{"keys": [("email", 1)], "unique": True, "name": "uniq_email"}],
    )

    await _collmod_or_create("note", NOTE_VALIDATOR)
    await _ensure_indexes(
        "note",
        [{"keys": [("user_id", 1), ("is_pinned", -1)], "name": "ix_owner_pinned"}],
    )
    _log.info("Colecciones e índices verificados")
