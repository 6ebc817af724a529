"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    limit: int
    window_ms: int
    actual_value: int
    http_status: int
    body: str
    retry_after: float
    waited_ms: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class ConfigurationAppError(AppError):
    """Raised when a component is constructed with an invalid configuration.

    A server-side fault: never caused by the content of a client request.
    """


class InterruptedAppError(AppError):
    """Raised when a caller waiting for a rate limit permit is cancelled.

    No permit is consumed. Retrying is left to the caller.
    """


class RateLimitTimeoutAppError(AppError):
    """Raised when no permit became available within the configured wait."""


class RemoteCallAppError(AppError):
    """Raised when the remote document API call fails."""

    @property
    def status_code(self) -> int | None:
        """HTTP status returned by the remote API (None for transport errors)."""
        return (self.details or {}).get("http_status")

    @property
    def body(self) -> str:
        return (self.details or {}).get("body", "")
