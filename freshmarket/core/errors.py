# Error taxonomy and the FastAPI handlers that turn it into response envelopes.
# Handlers switch on ErrorKind, never on message text.

from __future__ import annotations

import enum
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

log = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.DUPLICATE_EMAIL: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL_ERROR: 500,
}

MESSAGE_BY_STATUS: dict[int, str] = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    500: "Internal server error",
}


class AppError(Exception):
    """Base class for errors that carry their kind through the call chain."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, detail: str, *, field: Optional[str] = None) -> None:
        self.detail = detail
        self.field = field
        super().__init__(detail)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION_ERROR


class DuplicateEmail(AppError):
    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, detail: str = "User with the same email already exists") -> None:
        super().__init__(detail, field="email")


class Unauthorized(AppError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(detail)


class InvalidToken(AppError):
    kind = ErrorKind.INVALID_TOKEN

    def __init__(self, detail: str = "Invalid or expired token") -> None:
        super().__init__(detail)


class InvalidCredentials(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, detail: str = "Invalid email or password") -> None:
        super().__init__(detail)


class Forbidden(AppError):
    kind = ErrorKind.FORBIDDEN

    def __init__(self, detail: str = "Admin access required") -> None:
        super().__init__(detail)


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND


def error_body(*, status_code: int, error: str, kind: ErrorKind) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "message": MESSAGE_BY_STATUS.get(status_code, "Error"),
        "status": "error",
        "error": error,
        "errorCode": kind.value,
    }


def first_validation_message(errors: list[dict[str, Any]]) -> tuple[Optional[str], str]:
    """Return (field, message) for the first pydantic/FastAPI validation error."""

    if not errors:
        return None, "Validation error: invalid input"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "form")]
    field = ".".join(location) or None
    message = first.get("msg", "invalid value")
    if field:
        return field, f"Validation error: {field}: {message}"
    return None, f"Validation error: {message}"


def _kind_for_http_status(status_code: int) -> ErrorKind:
    for kind, code in STATUS_BY_KIND.items():
        if code == status_code:
            return kind
    return ErrorKind.INTERNAL_ERROR if status_code >= 500 else ErrorKind.VALIDATION_ERROR


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers producing the error envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
            detail = "Internal server error"
        else:
            log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.detail)
            detail = exc.detail
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(status_code=exc.status_code, error=detail, kind=exc.kind),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        _, message = first_validation_message(list(exc.errors()))
        log.warning("%s %s -> VALIDATION_ERROR: %s", request.method, request.url.path, message)
        return JSONResponse(
            status_code=400,
            content=error_body(status_code=400, error=message, kind=ErrorKind.VALIDATION_ERROR),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        kind = _kind_for_http_status(exc.status_code)
        log.warning("%s %s -> HTTP %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(status_code=exc.status_code, error=str(exc.detail), kind=kind),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        log.exception("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body(status_code=500, error="Internal server error", kind=ErrorKind.INTERNAL_ERROR),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body(status_code=500, error="Internal server error", kind=ErrorKind.INTERNAL_ERROR),
        )
