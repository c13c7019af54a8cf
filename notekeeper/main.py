"""Entrada principal de la app FastAPI (configura middlewares, excepciones y routers)."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pymongo.errors import PyMongoError

from notekeeper.api.router import api_router
from notekeeper.core.config import settings
from notekeeper.core.exceptions import register_exception_handlers
from notekeeper.core.logging import setup_logging
from notekeeper.core.middleware import add_middlewares
from notekeeper.infrastructure.db.bootstrap import ensure_collections
from notekeeper.infrastructure.db.mongo_async import close_async_db, ping

_log = logging.getLogger("notekeeper.startup")


@asynccontextmanager
async def lifespan(_: FastAPI):
    if not settings.jwt_secret:
        _log.warning("JWT_SECRET no configurado; login y registro fallarán")
    # Garantiza colecciones/índices/validadores mínimos si hay conexión
    if await ping():
        try:
            await ensure_collections()
        except PyMongoError as e:
            # No impedir el arranque si fallan validadores/índices
            _log.warning("ensure_collections() falló: %s", e)
    else:
        _log.warning("Mongo no listo; omitiendo ensure_collections()")
    yield
    close_async_db()


setup_logging(settings.log_level)
app = FastAPI(title=settings.app_name, lifespan=lifespan)

add_middlewares(app)
register_exception_handlers(app)

# Monta routers bajo el prefijo configurado
app.include_router(api_router, prefix=settings.api_prefix_normalized)
