"""Cliente MongoDB asíncrono (Motor).

Un único cliente/bd por proceso, inicializado de forma lazy. Los repositorios
obtienen la base con `get_async_db()`; nunca desde los routers.
"""
from __future__ import annotations

import logging
from typing import Optional

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from notekeeper.core.async_utils import with_timeout
from notekeeper.core.config import settings
from notekeeper.core.exceptions import OperationTimeoutError

_log = logging.getLogger("notekeeper.mongo")

_aclient: Optional[AsyncIOMotorClient] = None
_adb: Optional[AsyncIOMotorDatabase] = None


def _build_async_client() -> AsyncIOMotorClient:
    uri = settings.mongo_uri
    timeout_ms = int(settings.operation_timeout_seconds * 1000)
    kwargs = dict(serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
    if settings.mongo_use_tls:
        # SRV ya implica TLS; proveemos CA bundle para robustez
        kwargs["tlsCAFile"] = certifi.where()
        if not uri.startswith("mongodb+srv://"):
            kwargs["tls"] = True
        if settings.mongo_tls_insecure:
            kwargs["tlsAllowInvalidCertificates"] = True
        if settings.mongo_tls_allow_invalid_hostnames:
            kwargs["tlsAllowInvalidHostnames"] = True
    return AsyncIOMotorClient(uri, **kwargs)


def get_async_db() -> AsyncIOMotorDatabase:
    """Devuelve la DB asíncrona; inicializa lazy un único cliente/bd."""
    global _aclient, _adb
    if _adb is None:
        _aclient = _aclient or _build_async_client()
        _adb = _aclient[settings.mongo_db]
        _log.info("Motor listo (db=%s)", settings.mongo_db)
    return _adb


async def ping() -> bool:
    """True si Mongo responde a `ping` dentro del timeout configurado."""
    try:
        await with_timeout(get_async_db().command("ping"), op="mongo.ping")
        return True
    except (PyMongoError, OperationTimeoutError) as e:
        _log.warning("Mongo no accesible: %s", e)
        return False


def close_async_db() -> None:
    global _aclient, _adb
    if _aclient is not None:
        _aclient.close()
    _aclient = None
    _adb = None
