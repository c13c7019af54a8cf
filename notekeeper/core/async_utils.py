"""
Helpers para acotar en tiempo las llamadas bloqueantes (Mongo, hashing).
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from notekeeper.core.config import settings
from notekeeper.core.exceptions import OperationTimeoutError

T = TypeVar("T")

_log = logging.getLogger("notekeeper.timeouts")


async def with_timeout(aw: Awaitable[T], *, op: str = "operation", seconds: float | None = None) -> T:
    """Espera `aw` como máximo `seconds` (por defecto `operation_timeout_seconds`).

    Al expirar levanta OperationTimeoutError; la corrutina pendiente se cancela.
    """
    limit = seconds if seconds is not None else settings.operation_timeout_seconds
    try:
        return await asyncio.wait_for(aw, timeout=limit)
    except asyncio.TimeoutError:
        _log.warning("timeout op=%s limit_s=%s", op, limit)
        raise OperationTimeoutError() from None


async def run_sync(func: Callable[..., T], *args, op: str = "operation", **kwargs) -> T:
    """Ejecuta una función síncrona en el pool de hilos, con el mismo límite de tiempo."""
    return await with_timeout(asyncio.to_thread(func, *args, **kwargs), op=op)
