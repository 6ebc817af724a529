"""Pydantic schemas for document submission."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class CreateDocumentRequest(BaseModel):
    """Body sent to the create-document endpoint."""

    document: Dict[str, Any] = Field(
        ...,
        description="Document payload, serialized as-is into the request body.",
    )
    signature: str = Field(
        ...,
        min_length=1,
        description="Detached signature of the document.",
    )


class CreateDocumentResponse(BaseModel):
    """Outcome of a successful submission."""

    http_status: int = Field(
        ..., description="Status code returned by the remote API (200 or 201)."
    )
    remote_response: Any = Field(
        default=None,
        description="Remote response body: parsed JSON when possible, raw text otherwise.",
    )
