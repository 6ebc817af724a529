"""Application factory for the local submission gateway.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from crpt_api.api.routes import documents_router, health_router
from crpt_api.core.config import settings
from crpt_api.core.exception_handlers import setup_exception_handlers
from crpt_api.core.logging import configure_logging
from crpt_api.core.middleware import request_id_middleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="CRPT Document Gateway",
        description=(
            "Local gateway submitting documents to the CRPT create-document API. "
            "All submissions share one sliding-window rate limit; requests over "
            "the limit wait for a permit instead of failing."
        ),
        version="0.1.0",
    )

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(documents_router, prefix="/v1")
    app.include_router(health_router)

    return app
