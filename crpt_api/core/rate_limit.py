"""Process-wide rate limiter and document service wiring.

Every submission in the process must share one limiter, otherwise each
caller would get its own budget. The limiter is built once from settings and
cached in-module.

Rate limiting strategy:
- Global sliding window over all outbound document submissions.
- Window is one configured time unit; the limit is the number of permits.
"""

from __future__ import annotations

import logging
import threading

from crpt_api.adapters.documents.factory import create_document_client
from crpt_api.adapters.rate_limit.base import AbstractRateLimiter
from crpt_api.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter
from crpt_api.core.config import TimeUnit, settings
from crpt_api.services.document_service import DocumentService

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[TimeUnit, int] | None = None
_service: DocumentService | None = None
_lock = threading.Lock()


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve the ledger across calls.
    If configuration changes (primarily in tests), the limiter is rebuilt.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_time_unit,
        settings.app.rate_limit_requests,
    )

    with _lock:
        if _limiter is None or _limiter_config != config:
            _limiter = SlidingWindowRateLimiter.from_time_unit(*config)
            _limiter_config = config
            logger.info(
                "rate_limit.configured",
                extra={
                    "time_unit": config[0].value,
                    "limit": config[1],
                    "max_wait_s": settings.app.rate_limit_max_wait_seconds,
                },
            )

        return _limiter


def get_document_service() -> DocumentService:
    """Return the process-wide document service.

    Used as a FastAPI dependency; tests override it via dependency_overrides.
    """

    global _service

    limiter = get_rate_limiter()
    with _lock:
        if _service is None or _service.limiter is not limiter:
            if _service is not None:
                _service.client.close()
            _service = DocumentService(
                limiter=limiter,
                client=create_document_client(),
                max_wait_seconds=settings.app.rate_limit_max_wait_seconds,
            )
        return _service
