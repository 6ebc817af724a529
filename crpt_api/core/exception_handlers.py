"""Global exception handlers for consistent gateway error responses.

Design:
- AppError subclasses map to an HTTP status by type (see _STATUS_BY_ERROR)
- Unexpected Exception -> generic 500 (safety net)
- All responses include request_id for tracing
"""

import logging
import math

from fastapi import Request
from fastapi.responses import JSONResponse

from crpt_api.core.errors import (
    AppError,
    ConfigurationAppError,
    InterruptedAppError,
    RateLimitTimeoutAppError,
    RemoteCallAppError,
    ValidationAppError,
)
from crpt_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, 400),
    (ConfigurationAppError, 500),
    (RateLimitTimeoutAppError, 429),
    (RemoteCallAppError, 502),
    (InterruptedAppError, 503),
)


def status_for_error(exc: AppError) -> int:
    """HTTP status for a domain error (400 when the type is not mapped)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain errors with a consistent JSON envelope.

    - ValidationAppError -> 400 (client fault)
    - ConfigurationAppError -> 500 (the gateway itself is misconfigured)
    - RateLimitTimeoutAppError -> 429 with Retry-After
    - RemoteCallAppError -> 502 (the document API rejected or failed the call)
    - InterruptedAppError -> 503 (the wait for a permit was abandoned)

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with error code, message, request_id and optional details.
    """
    status_code = status_for_error(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitTimeoutAppError):
        retry_after = (exc.details or {}).get("retry_after", 1)
        headers["Retry-After"] = str(max(1, math.ceil(retry_after)))

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure for debugging but returns a generic message, so no
    stack traces or internals reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register the exception handlers on a FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
