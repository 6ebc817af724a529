from __future__ import annotations

from fastapi import APIRouter

from crpt_api.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter
from crpt_api.core.rate_limit import get_rate_limiter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check with a snapshot of the submission rate limit.

    Returns:
        dict: "status" plus the limiter's limit, window and permits in use.
    """

    limiter = get_rate_limiter()
    payload: dict = {"status": "ok"}
    if isinstance(limiter, SlidingWindowRateLimiter):
        payload["rate_limit"] = {
            "limit": limiter.limit,
            "window_ms": limiter.window_ms,
            "in_flight": limiter.in_flight(),
        }
    return payload
