"""Global error handling middleware.

This module provides consistent error responses across all API endpoints.
All exceptions are caught and converted to a standardized JSON format with
appropriate HTTP status codes.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from spendwise.config import settings
from spendwise.core.errors import get_error
from spendwise.core.exceptions import LedgerError

logger = logging.getLogger(__name__)


def error_response(error_code: str, status_code: int, message: str | None = None) -> JSONResponse:
    """Build the standard error body for a catalog code.

    Args:
        error_code: Code from the error catalog
        status_code: HTTP status to return
        message: Optional technical message replacing the catalog one

    Returns:
        JSONResponse with error_code, message, user_message, suggestion and
        retry_allowed
    """
    error_info = get_error(error_code)
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message or error_info["message"],
            "user_message": error_info["user_message"],
            "suggestion": error_info["suggestion"],
            "retry_allowed": error_info["retry_allowed"],
        },
    )


async def handle_ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
    """Handle wallet and ledger exceptions.

    Args:
        request: The incoming request
        exc: The ledger exception

    Returns:
        JSONResponse with error details from catalog
    """
    # Details may carry ids and amounts; only log them in debug.
    extra = {"error_code": exc.error_code, "path": request.url.path, "method": request.method}
    if settings.debug:
        extra["details"] = exc.details

    if exc.http_status >= 500:
        logger.error(f"Ledger error: {exc.error_code}", extra=extra)
    else:
        logger.warning(f"Ledger error: {exc.error_code}", extra=extra)

    return error_response(exc.error_code, exc.http_status)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Args:
        request: The incoming request
        exc: The validation error

    Returns:
        JSONResponse listing the offending fields
    """
    errors = exc.errors()
    error_messages = []

    for error in errors:
        field = ".".join(str(x) for x in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        error_messages.append(f"{field}: {msg}")

    extra = {"path": request.url.path, "method": request.method}
    if settings.debug:
        extra["errors"] = errors
    logger.warning(f"Validation error on {request.url.path}", extra=extra)

    return error_response("VAL_001", status.HTTP_400_BAD_REQUEST, " | ".join(error_messages))


async def handle_integrity_error(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle database integrity errors.

    Unique violations (e.g. a membership inserted twice by racing requests)
    become 409; anything else is a 500.
    """
    # Do not log str(exc): it can include SQL + bound parameters.
    if settings.debug:
        logger.exception(
            f"Database integrity error on {request.url.path}",
            extra={"path": request.url.path, "method": request.method},
        )
    else:
        logger.error(
            f"Database integrity error on {request.url.path}",
            extra={"path": request.url.path, "method": request.method},
        )

    error_msg = str(exc).lower()
    if "unique" in error_msg or "duplicate" in error_msg:
        return error_response("DB_002", status.HTTP_409_CONFLICT)
    return error_response("DB_001", status.HTTP_500_INTERNAL_SERVER_ERROR)


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without exposing internal details."""
    extra = {
        "error_type": type(exc).__name__,
        "path": request.url.path,
        "method": request.method,
    }
    # In non-debug: do not log str(exc) or traceback (may include sensitive data).
    if settings.debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    return error_response("SYS_001", status.HTTP_500_INTERNAL_SERVER_ERROR)
