"""HTTP middleware binding a correlation id to each gateway request.

The id is taken from the incoming header or generated, bound to the logging
context while the request runs (including the threadpool worker that waits
for a rate-limit permit), and echoed back in the response headers. One
``gateway.request_completed`` record is logged per request.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from crpt_api.core.config import settings
from crpt_api.core.logging import bound_request_id

logger = logging.getLogger(__name__)

DURATION_HEADER = "X-Request-Duration-ms"


async def request_id_middleware(request: Request, call_next) -> Response:
    """Run the request under its correlation id and log how it ended.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response with the request id and duration headers added.
    """

    header_name = settings.log.request_id_header
    with bound_request_id(request.headers.get(header_name) or str(uuid.uuid4())) as request_id:
        start = time.perf_counter()
        response: Response = await call_next(request)
        # Includes time spent waiting for a rate-limit permit
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "gateway.request_completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

    response.headers[header_name] = request_id
    response.headers.setdefault(DURATION_HEADER, f"{duration_ms:.2f}")
    return response
