"""HTTP document client adapter."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from crpt_api.adapters.documents.base import AbstractDocumentClient
from crpt_api.core.errors import RemoteCallAppError
from crpt_api.schemas.document import CreateDocumentRequest, CreateDocumentResponse

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({200, 201})

# Keep error details readable when the remote returns a large HTML page
_MAX_ERROR_BODY_CHARS = 2000


class HttpDocumentClient(AbstractDocumentClient):
    """Client posting documents to the create-document endpoint.

    Uses a single shared ``httpx.Client`` so connections are pooled across
    submissions. ``httpx.Client`` is safe to share between threads.
    """

    def __init__(
        self,
        base_url: str,
        documents_path: str,
        auth_token: str,
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Scheme and host of the API (e.g., "https://ismp.crpt.ru").
            documents_path: Path of the create-document endpoint.
            auth_token: Bearer token for the Authorization header.
            timeout_seconds: Timeout for requests in seconds.
            transport: Optional custom transport (mainly for tests).
        """
        self.documents_path = documents_path
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bearer {auth_token}",
                "Content-Type": "application/json",
            },
        )

    def __enter__(self) -> "HttpDocumentClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def create_document(self, request: CreateDocumentRequest) -> CreateDocumentResponse:
        """POST the document and signature as JSON.

        Args:
            request: Document and signature to submit.

        Returns:
            CreateDocumentResponse: Status and parsed body of the accepted call.

        Raises:
            RemoteCallAppError: On transport failure or a status other than 200/201.
        """
        try:
            response = self.client.post(
                self.documents_path,
                content=request.model_dump_json(),
            )
        except httpx.HTTPError as exc:
            logger.error(
                "document.transport_error",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            raise RemoteCallAppError(
                code="remote_transport_error",
                message=f"Document API request failed: {exc}",
            ) from exc

        if response.status_code not in SUCCESS_STATUSES:
            body = response.text
            logger.warning(
                "document.remote_error",
                extra={"http_status": response.status_code, "body_chars": len(body)},
            )
            raise RemoteCallAppError(
                code="remote_call_failed",
                message=f"API error: {response.status_code}",
                details={
                    "http_status": response.status_code,
                    "body": body[:_MAX_ERROR_BODY_CHARS],
                },
            )

        return CreateDocumentResponse(
            http_status=response.status_code,
            remote_response=_parse_body(response),
        )


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError:
        return response.text
