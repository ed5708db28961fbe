"""Centralized error handling.

Every failure leaves the API as the same envelope used for successful
replies, ``{"success": false, "message": ..., "errors": [...]}``, so
clients only ever branch on ``success``.
"""

import logging
from typing import Any
from uuid import UUID, uuid4

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from psycopg.errors import (
    CheckViolation as CheckViolationError,
    ForeignKeyViolation as ForeignKeyViolationError,
    NotNullViolation as NotNullViolationError,
    UniqueViolation as UniqueViolationError,
)
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DBAPIError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from olw.config.settings import get_settings
from olw.exceptions import (
    ConflictError,
    DomainError,
    InvalidInputError,
    ResourceNotFoundError,
    ValidationError,
)


logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


# === Error Response Formatting ===


def format_error_response(
    message: str,
    status_code: int,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Format a consistent error response."""
    content: dict[str, Any] = {"success": False, "message": message}

    if errors:
        content["errors"] = errors

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _field_name(loc: tuple[Any, ...] | list[Any]) -> str:
    # Drop the request part ("body", "query", ...) FastAPI prefixes to every location
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in {"body", "query", "path", "header", "cookie"}:
        parts = parts[1:]
    return ".".join(parts)


# === Handlers ===


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query/path validation failures."""
    raw_errors = exc.errors()
    logger.info("Validation error on %s %s: %s", request.method, request.url.path, raw_errors)

    if any(error.get("type") == "json_invalid" for error in raw_errors):
        return format_error_response("Invalid JSON in request body.", status.HTTP_400_BAD_REQUEST)

    errors = [
        {
            "field": _field_name(error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in raw_errors
    ]
    return format_error_response("Validation failed", status.HTTP_422_UNPROCESSABLE_ENTITY, errors=errors)


DOMAIN_STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
)


async def handle_domain_errors(request: Request, exc: DomainError) -> JSONResponse:
    """Map typed service failures onto status codes."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, code in DOMAIN_STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break

    logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return format_error_response(exc.message, status_code)


async def handle_http_errors(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP errors raised by the router, the auth gate and route handlers."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return format_error_response(
            f"Route {request.method} {request.url.path} not found",
            status.HTTP_404_NOT_FOUND,
        )

    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        logger.warning("Authentication failed on %s %s: %s", request.method, request.url.path, exc.detail)
    elif exc.status_code == status.HTTP_403_FORBIDDEN:
        logger.warning("Authorization failed on %s %s: %s", request.method, request.url.path, exc.detail)

    return format_error_response(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))


async def handle_rate_limit_errors(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle slowapi rate limit rejections."""
    logger.warning("Rate limit exceeded on %s %s: %s", request.method, request.url.path, exc.detail)
    response = format_error_response("Too many requests", status.HTTP_429_TOO_MANY_REQUESTS)
    limiter = getattr(request.app.state, "limiter", None)
    if limiter is not None and hasattr(request.state, "view_rate_limit"):
        response = limiter._inject_headers(response, request.state.view_rate_limit)  # noqa: SLF001
    return response


async def handle_database_errors(request: Request, exc: DBAPIError) -> JSONResponse:
    """Handle database-related errors."""
    logger.exception(
        "Database error on %s %s",
        request.method,
        request.url.path,
        extra={"error_type": type(exc).__name__},
        exc_info=(type(exc), exc, exc.__traceback__),
    )

    original = getattr(exc, "orig", None)
    text = str(original or exc).lower()

    if isinstance(original, UniqueViolationError) or (isinstance(exc, IntegrityError) and "unique" in text):
        return format_error_response("A record with this value already exists.", status.HTTP_409_CONFLICT)

    if isinstance(original, ForeignKeyViolationError) or (isinstance(exc, IntegrityError) and "foreign key" in text):
        return format_error_response("Related record not found.", status.HTTP_400_BAD_REQUEST)

    if isinstance(original, (NotNullViolationError, CheckViolationError)) or isinstance(exc, IntegrityError):
        return format_error_response("Required data is missing or invalid.", status.HTTP_400_BAD_REQUEST)

    return format_error_response("Database error", status.HTTP_500_INTERNAL_SERVER_ERROR)


async def handle_unexpected_errors(request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled errors."""
    error_id = uuid4()
    log_error_context(request, exc, error_id)

    message = str(exc) if get_settings().ENVIRONMENT == "development" else "Internal server error"
    return format_error_response(
        message,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        errors=[{"errorId": str(error_id)}],
    )


# === Utility Functions ===


def log_error_context(request: Request, exc: Exception, error_id: UUID | None = None) -> None:
    """Log error context for debugging, never including credentials."""
    context = {
        "error_id": str(error_id) if error_id else None,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client_host": request.client.host if request.client else "unknown",
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    context["headers"] = {k: v for k, v in request.headers.items() if k.lower() not in SENSITIVE_HEADERS}

    logger.error("Request failed", extra=context, exc_info=exc)
