from __future__ import annotations

from crpt_api.api.routes.documents import router as documents_router
from crpt_api.api.routes.health import router as health_router

__all__ = ["documents_router", "health_router"]
