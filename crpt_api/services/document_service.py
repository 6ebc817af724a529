"""Document submission service guarding the remote API with a rate limiter.

This service is the only path to the create-document endpoint. It handles:
- Input validation
- Admission through the shared rate limiter (blocking)
- Delegating the HTTP call to the document client adapter

Once a caller is admitted the permit is spent, whatever the remote outcome:
the limiter caps attempts, not successes. Retrying after a failure is the
caller's decision.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from typing import Any

from pydantic import TypeAdapter

from crpt_api.adapters.documents.base import AbstractDocumentClient
from crpt_api.adapters.rate_limit.base import AbstractRateLimiter
from crpt_api.core.errors import ValidationAppError
from crpt_api.schemas.document import CreateDocumentRequest, CreateDocumentResponse

logger = logging.getLogger(__name__)

# Documents may be mappings, pydantic models, dataclasses or anything else
# pydantic can turn into JSON; the result must be a JSON object.
_DOCUMENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


def _fingerprint(signature: str) -> str:
    """Short, non-reversible id for correlating a submission in logs."""
    return hashlib.sha256(signature.encode()).hexdigest()[:16]


class DocumentService:
    """Service submitting documents under a shared rate limit.

    Attributes:
        limiter: Rate limiter every submission must pass through.
        client: Transport adapter that performs the HTTP call.
        max_wait_seconds: Optional ceiling on the time spent waiting for a
            permit. None waits indefinitely.
    """

    def __init__(
        self,
        limiter: AbstractRateLimiter,
        client: AbstractDocumentClient,
        *,
        max_wait_seconds: float | None = None,
    ) -> None:
        self.limiter = limiter
        self.client = client
        self.max_wait_seconds = max_wait_seconds

    def _build_request(self, document: Any, signature: str | None) -> CreateDocumentRequest:
        """Validate inputs and build the request body.

        Raises:
            ValidationAppError: If the document or signature is missing, or the
                document does not serialize to a JSON object.
        """
        if document is None:
            raise ValidationAppError(
                code="document_required",
                message="document must not be null",
            )
        if not signature:
            raise ValidationAppError(
                code="signature_required",
                message="signature must not be empty",
            )

        try:
            payload = _DOCUMENT_ADAPTER.dump_python(document, mode="json")
        except ValueError as exc:
            raise ValidationAppError(
                code="document_not_serializable",
                message=f"document cannot be serialized to JSON: {exc}",
            ) from exc

        if not isinstance(payload, dict):
            raise ValidationAppError(
                code="document_not_object",
                message="document must serialize to a JSON object",
                details={"hint": f"got {type(document).__name__}"},
            )

        return CreateDocumentRequest(document=payload, signature=signature)

    def create_document(
        self,
        document: Any,
        signature: str | None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> CreateDocumentResponse:
        """Submit a document once the rate limiter admits the caller.

        Blocks while the limiter is at capacity. Nothing is sent if the wait
        is interrupted or times out.

        Args:
            document: Document payload (mapping, pydantic model, dataclass...).
            signature: Signature of the document.
            cancel_event: Event that aborts the wait for a permit when set.

        Returns:
            CreateDocumentResponse from the remote API.

        Raises:
            ValidationAppError: If inputs are missing or not a JSON object.
            InterruptedAppError: If the wait was cancelled.
            RateLimitTimeoutAppError: If max_wait_seconds elapsed first.
            RemoteCallAppError: If the remote call failed.
        """
        # Step 1: Validate before touching the limiter
        request = self._build_request(document, signature)
        fingerprint = _fingerprint(request.signature)

        # Step 2: Wait for a permit (errors propagate, nothing sent)
        start = time.perf_counter()
        self.limiter.acquire(timeout=self.max_wait_seconds, cancel_event=cancel_event)
        waited_ms = (time.perf_counter() - start) * 1000

        # Step 3: Send; the permit stays consumed even if this fails
        response = self.client.create_document(request)

        logger.info(
            "document.submitted",
            extra={
                "signature_hash": fingerprint,
                "http_status": response.http_status,
                "waited_ms": round(waited_ms, 2),
            },
        )
        return response
