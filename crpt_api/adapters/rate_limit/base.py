"""Rate limiter interfaces.

Callers should depend on this abstraction (not the concrete implementation)
so the admission strategy can be swapped with minimal changes.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a non-blocking admission attempt.

    Attributes:
        allowed: Whether the caller was admitted (and a permit consumed).
        limit: Max admissions per window.
        remaining: Permits left in the current window after this attempt.
        retry_after_ms: Milliseconds until a permit frees up when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_ms: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters guarding outbound calls."""

    @abstractmethod
    def acquire(
        self,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Block until the caller may proceed, then consume one permit.

        Args:
            timeout: Maximum seconds to wait. None waits indefinitely.
            cancel_event: Event that aborts the wait when set.

        Raises:
            InterruptedAppError: If cancel_event was set while waiting.
            RateLimitTimeoutAppError: If timeout elapsed before admission.
        """
        raise NotImplementedError

    @abstractmethod
    def try_acquire(self) -> RateLimitResult:
        """Consume one permit if available without waiting.

        Returns:
            RateLimitResult describing whether the caller was admitted.
        """
        raise NotImplementedError
