"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: every process enforces its own independent limit.
- Thread-safe: all ledger access happens under a single condition lock.
- Sliding, not bucketed: expiry is evaluated lazily against the oldest
  admission timestamp on each check, never on a timer.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from crpt_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from crpt_api.core.config import TimeUnit
from crpt_api.core.errors import (
    ConfigurationAppError,
    InterruptedAppError,
    RateLimitTimeoutAppError,
)

logger = logging.getLogger(__name__)

# Upper bound on a single wait when the caller supplied a cancel event,
# so that setting the event is noticed promptly.
_CANCEL_POLL_MS = 50


def monotonic_ms() -> int:
    """Milliseconds from a monotonic clock."""
    return time.monotonic_ns() // 1_000_000


class SlidingWindowRateLimiter(AbstractRateLimiter):
    """Blocking limiter admitting at most ``limit`` callers per sliding window.

    The limiter keeps a ledger of admission timestamps (oldest first, at most
    ``limit`` entries). A caller is admitted when fewer than ``limit`` entries
    are younger than the window; otherwise it waits on a condition variable
    until the oldest entry ages out, then re-checks.

    Waiters are woken all at once after each admission and re-evaluate their
    own predicate, so admission order among waiters is left to the scheduler.
    There is no timeout unless one is passed to ``acquire``: a caller may wait
    indefinitely while newer callers keep the window full.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        clock: Callable[[], int] = monotonic_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum admissions within any window.
            window_ms: Window length in milliseconds.
            clock: Time source returning integer milliseconds.

        Raises:
            ConfigurationAppError: If limit or window_ms are not positive.
        """
        if limit <= 0:
            raise ConfigurationAppError(
                code="invalid_rate_limit",
                message="limit must be >= 1",
                details={"actual_value": limit},
            )
        if window_ms <= 0:
            raise ConfigurationAppError(
                code="invalid_rate_window",
                message="window_ms must be >= 1",
                details={"actual_value": window_ms},
            )

        self._limit = limit
        self._window_ms = window_ms
        self._clock = clock
        self._cond = threading.Condition(threading.Lock())
        self._ledger: deque[int] = deque(maxlen=limit)

    @classmethod
    def from_time_unit(
        cls,
        time_unit: TimeUnit,
        limit: int,
        *,
        clock: Callable[[], int] = monotonic_ms,
    ) -> "SlidingWindowRateLimiter":
        """Build a limiter whose window is one ``time_unit`` long."""
        return cls(limit=limit, window_ms=TimeUnit(time_unit).millis, clock=clock)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"SlidingWindowRateLimiter(limit={self._limit}, window_ms={self._window_ms})"

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def in_flight(self) -> int:
        """Number of admissions still inside the current window."""
        with self._cond:
            return self._count_in_window(self._clock())

    def acquire(
        self,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Block until admitting the caller keeps the window within its limit.

        The wait predicate is re-checked under the lock after every wake-up,
        so spurious or early wake-ups never lead to over-admission. A caller
        that is cancelled or times out leaves the ledger untouched.

        Args:
            timeout: Maximum seconds to wait. None (the default) waits
                indefinitely.
            cancel_event: When set while the caller is waiting, the wait is
                abandoned. Only checked when the caller actually has to wait.

        Raises:
            InterruptedAppError: If cancel_event was set while waiting.
            RateLimitTimeoutAppError: If timeout elapsed before admission.
        """
        with self._cond:
            now = self._clock()
            started = now
            deadline = None if timeout is None else now + int(timeout * 1000)
            logged_wait = False

            while self._at_capacity(now):
                if cancel_event is not None and cancel_event.is_set():
                    logger.info(
                        "rate_limit.interrupted",
                        extra={"limit": self._limit, "waited_ms": now - started},
                    )
                    raise InterruptedAppError(
                        code="rate_limit_interrupted",
                        message="Interrupted while waiting for a rate limit permit",
                        details={"waited_ms": now - started},
                    )

                wait_ms = self._window_ms - (now - self._ledger[0])
                if deadline is not None:
                    remaining_ms = deadline - now
                    if remaining_ms <= 0:
                        logger.warning(
                            "rate_limit.timeout",
                            extra={"limit": self._limit, "waited_ms": now - started},
                        )
                        raise RateLimitTimeoutAppError(
                            code="rate_limit_timeout",
                            message="Timed out waiting for a rate limit permit",
                            details={
                                "waited_ms": now - started,
                                "retry_after": wait_ms / 1000,
                            },
                        )
                    wait_ms = min(wait_ms, remaining_ms)
                if cancel_event is not None:
                    wait_ms = min(wait_ms, _CANCEL_POLL_MS)

                if not logged_wait:
                    logger.info(
                        "rate_limit.waiting",
                        extra={
                            "limit": self._limit,
                            "window_ms": self._window_ms,
                            "wait_ms": wait_ms,
                        },
                    )
                    logged_wait = True

                self._cond.wait(wait_ms / 1000)
                now = self._clock()

            self._admit(now)

        logger.debug(
            "rate_limit.admitted",
            extra={
                "admitted_at_ms": now,
                "waited_ms": now - started,
                "limit": self._limit,
            },
        )

    def try_acquire(self) -> RateLimitResult:
        """Consume a permit if one is free right now; never waits."""
        with self._cond:
            now = self._clock()
            if self._at_capacity(now):
                retry_after = self._window_ms - (now - self._ledger[0])
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    retry_after_ms=retry_after,
                )

            self._admit(now)
            remaining = max(0, self._limit - self._count_in_window(now))

        logger.debug(
            "rate_limit.admitted",
            extra={"admitted_at_ms": now, "waited_ms": 0, "limit": self._limit},
        )
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=remaining,
            retry_after_ms=None,
        )

    def _at_capacity(self, now: int) -> bool:
        return (
            len(self._ledger) >= self._limit
            and now - self._ledger[0] < self._window_ms
        )

    def _admit(self, now: int) -> None:
        # maxlen drops the oldest entry once the ledger is full
        self._ledger.append(now)
        self._cond.notify_all()

    def _count_in_window(self, now: int) -> int:
        return sum(1 for ts in self._ledger if now - ts < self._window_ms)
