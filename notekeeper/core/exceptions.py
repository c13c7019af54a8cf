"""
Domain errors and global exception handlers for consistent API envelopes.

Every response body follows `{"error": bool, "message": str, ...}`.
"""
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class AppError(Exception):
    """Base de errores de dominio; cada subclase fija su status HTTP."""

    status_code: int = 500
    message: str = "Server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request."


class ConflictError(AppError):
    status_code = 409
    message = "Resource already exists."


class NotFoundError(AppError):
    status_code = 404
    message = "Not found."


class UnknownUserError(NotFoundError):
    """Login contra un email no registrado."""

    status_code = 400
    message = "User not found."


class UnauthenticatedError(AppError):
    status_code = 401
    message = "Unauthenticated"


class UnauthorizedError(UnauthenticatedError):
    message = "Unauthorized"


class InvalidCredentialsError(AppError):
    status_code = 401
    message = "Invalid credentials."


class InvalidTokenError(AppError):
    status_code = 401
    message = "Invalid token"


class ExpiredTokenError(InvalidTokenError):
    message = "Token expired"


class RateLimitedError(AppError):
    status_code = 429
    message = "Too many attempts, try again later."


class OperationTimeoutError(AppError):
    status_code = 504
    message = "Operation timed out."


class InternalError(AppError):
    status_code = 500
    message = "Server error."


def _req_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", object()), "request_id", None)


def _envelope(request: Request, status_code: int, message: str, **extra: Any) -> JSONResponse:
    body: Dict[str, Any] = {"error": True, "message": message, **extra}
    rid = _req_id(request)
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    log = logging.getLogger("notekeeper.errors")

    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            log.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        return _envelope(request, exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(request, exc.status_code, exc.detail or "HTTP error")

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        return _envelope(request, 400, "Validation error", errors=jsonable_encoder(exc.errors()))

    @app.exception_handler(Exception)
    async def _generic_handler(request: Request, exc: Exception):
        log.exception("Unhandled error request_id=%s", _req_id(request))
        return _envelope(request, InternalError.status_code, InternalError.message)
