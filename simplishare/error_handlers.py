"""Global exception handlers producing the uniform error envelope."""
import re
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.responses import error_response
from .core.validation import format_validation_errors
from .exceptions import AppException, ErrorCode
from .logging_config import get_logger

logger = get_logger("error_handlers")


_DUPLICATE_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),  # sqlite
    re.compile(r"Key \((\w+)\)=\(.*\) already exists"),  # postgresql
)


def duplicate_field(exc: IntegrityError) -> Optional[str]:
    """
    Column behind a unique violation, or None when the integrity error is
    of another kind, such as a NOT NULL violation.
    """
    text = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
    for pattern in _DUPLICATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} - {exc.status_code} "
        f"[{int(exc.error_code)}] {exc.message}"
    )
    return error_response(request, exc.status_code, exc.message, exc.error, exc.error_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for request validation errors raised by FastAPI body/path parsing."""
    errors = format_validation_errors(exc.errors())
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"validation_errors": errors}
    )
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Validation Error",
        errors,
        ErrorCode.INVALID_FIELD_FORMAT,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique-key violations that escaped a route are reported as duplicates."""
    field = duplicate_field(exc)
    if field is None:
        return await generic_exception_handler(request, exc)
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(
        request,
        status.HTTP_409_CONFLICT,
        f"{field} is already in use.",
        None,
        ErrorCode.DUPLICATE_ENTRY,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-level HTTP errors, most notably unknown routes."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Route {request.method} {request.url.path} not found"
        code = ErrorCode.ROUTE_NOT_FOUND
    else:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        code = {
            status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED_ACCESS,
            status.HTTP_403_FORBIDDEN: ErrorCode.ACCESS_DENIED,
        }.get(exc.status_code, ErrorCode.SERVER_ERROR)

    logger.warning(f"[HTTP_ERROR] {request.method} {request.url.path} - Status: {exc.status_code}")
    return error_response(request, exc.status_code, message, None, code, headers=getattr(exc, "headers", None))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unexpected exceptions."""
    logger.critical(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=exc
    )
    message = str(exc) if settings.expose_internal_errors and str(exc) else "Internal Server Issue."
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        message,
        None,
        ErrorCode.SERVER_ERROR,
    )
