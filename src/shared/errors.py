"""Error taxonomy and the JSON error envelope returned by every endpoint.

Every failure response has the shape ``{"success": false, "message": ...,
"requestId": ...}`` plus, depending on the error, ``errors`` (field level
validation problems), ``data`` (e.g. unavailable products) or
``errorCode`` (opaque reference for server-side faults).
"""

import time
from enum import Enum
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.exceptions import ValidationError as DomainValidationError

from shared.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    STOCK_CONFLICT = "STOCK_CONFLICT"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    SERVER_ERROR = "SERVER_ERROR"


class StorefrontError(Exception):
    """Base class for errors that map onto a client-facing response."""

    kind = ErrorKind.SERVER_ERROR
    status_code = 500
    default_message = "Something is wrong with server! Please try again later"

    def __init__(self, message=None, *, errors=None, data=None, headers=None):
        self.message = message or self.default_message
        self.errors = errors
        self.data = data
        self.headers = headers or {}
        super().__init__(self.message)


class RequestValidationFailed(StorefrontError):
    kind = ErrorKind.VALIDATION_ERROR
    status_code = 400
    default_message = "Invalid data provided"


class AuthenticationError(StorefrontError):
    kind = ErrorKind.AUTH_ERROR
    status_code = 401
    default_message = "Login first to access this route"


class PermissionDenied(StorefrontError):
    kind = ErrorKind.AUTH_ERROR
    status_code = 403
    default_message = "Unauthorized access"


class NotFound(StorefrontError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Resource not found"


class RateLimitExceeded(StorefrontError):
    kind = ErrorKind.RATE_LIMITED
    status_code = 429
    default_message = "Too many requests, please try again later"

    def __init__(self, retry_after: int, message=None):
        self.retry_after = retry_after
        super().__init__(message, headers={"Retry-After": str(retry_after)})


class StockConflict(StorefrontError):
    kind = ErrorKind.STOCK_CONFLICT
    status_code = 409
    default_message = "Some products were unavailable when we started the payment operation so we stopped everything!"


class ServiceTimeout(StorefrontError):
    kind = ErrorKind.TIMEOUT_ERROR
    status_code = 503
    default_message = "Service temporarily unavailable, please try again later"


class DatabaseError(StorefrontError):
    kind = ErrorKind.DATABASE_ERROR
    status_code = 500
    default_message = "Database service unavailable, please try again later"


def new_error_code() -> str:
    """Opaque, non-sensitive reference handed to clients for server faults."""
    return f"ERR{format(int(time.time() * 1000), 'x')[-6:]}{uuid4().hex[:4]}".upper()


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_body(request_id, message, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    body["requestId"] = request_id
    return body


def error_response(request: Request, exc: StorefrontError, error_code: str | None = None) -> JSONResponse:
    extra = {"errors": exc.errors, "data": exc.data}
    if error_code is None and exc.status_code >= 500:
        error_code = new_error_code()
    extra["errorCode"] = error_code
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request_id_of(request), exc.message, **extra),
        headers=exc.headers or None,
    )


def _field_messages(messages) -> list[dict]:
    """Flatten Protean's ``{field: [messages]}`` into a list of field errors."""
    if not isinstance(messages, dict):
        return [{"field": None, "message": str(messages)}]
    return [
        {"field": field, "message": message}
        for field, field_messages in messages.items()
        for message in (field_messages if isinstance(field_messages, list) else [field_messages])
    ]


def register_exception_handlers(app: FastAPI, reporter=None) -> None:
    """Install the storefront error envelope on a FastAPI application.

    ``reporter`` is an ``ExceptionReporter``; when omitted the application's
    ``state.reporter`` is used if present.
    """

    @app.exception_handler(StorefrontError)
    async def _storefront_error(request: Request, exc: StorefrontError):
        return error_response(request, exc)

    @app.exception_handler(DomainValidationError)
    async def _domain_validation_error(request: Request, exc: DomainValidationError):
        logger.warning("Domain validation failed", path=request.url.path, errors=exc.messages)
        return JSONResponse(
            status_code=400,
            content=error_body(
                request_id_of(request),
                "Invalid data provided",
                errors=_field_messages(exc.messages),
            ),
        )

    @app.exception_handler(ObjectNotFoundError)
    async def _object_not_found(request: Request, exc: ObjectNotFoundError):
        logger.info("Object not found", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=404,
            content=error_body(request_id_of(request), NotFound.default_message),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_body(request_id_of(request), "Invalid data provided", errors=errors),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        error_code = new_error_code()
        logger.error(
            "Unhandled error",
            path=request.url.path,
            error_code=error_code,
            error=str(exc),
            exc_info=exc,
        )
        active_reporter = reporter or getattr(request.app.state, "reporter", None)
        if active_reporter is not None:
            await active_reporter.capture(
                exc,
                tags={"component": "api", "route": request.url.path, "errorCode": error_code},
            )
        return JSONResponse(
            status_code=500,
            content=error_body(
                request_id_of(request),
                StorefrontError.default_message,
                errorCode=error_code,
            ),
        )
