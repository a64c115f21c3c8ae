"""Error taxonomy shared by the services and its JSON rendering.

Every failure a client can act on is an ``AppError`` subclass carrying its
HTTP status and a stable machine-readable ``code``. Handlers registered by
``install_error_handlers`` turn them into ``{"error": code, "message": ...}``.
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    code = "internal"
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self):
        return None


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"

    @property
    def headers(self):
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


class InvalidInput(AppError):
    status_code = 400
    code = "invalid_input"
    default_message = "Invalid input"


class Infrastructure(AppError):
    status_code = 503
    code = "infrastructure"
    default_message = "Service temporarily unavailable"


class ExecutorUnavailable(Infrastructure):
    default_message = "Code execution service unavailable"


def _error_body(code: str, message: str, **extra) -> dict:
    body = {"error": code, "message": message}
    body.update(extra)
    return body


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        _error_body(exc.code, exc.message),
        status_code=exc.status_code,
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        _error_body("invalid_input", "Request validation failed", details=jsonable_encoder(exc.errors())),
        status_code=InvalidInput.status_code,
    )


async def operational_error_handler(request: Request, exc: OperationalError):
    logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
    err = Infrastructure("Database unavailable")
    return JSONResponse(_error_body(err.code, err.message), status_code=err.status_code)


async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Global exception: %s\n%s", exc, traceback.format_exc())
    return JSONResponse(_error_body("internal", "Internal server error"), status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(OperationalError, operational_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
