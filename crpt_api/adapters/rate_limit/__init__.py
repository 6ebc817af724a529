"""Rate limiting adapters.

This package provides a small abstraction layer so the document client can
depend on an admission interface while the sliding-window limiter does the
actual bookkeeping.
"""

from crpt_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from crpt_api.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RateLimitResult",
    "SlidingWindowRateLimiter",
]
