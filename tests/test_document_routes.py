"""Tests for the gateway routes with the document service overridden."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from crpt_api.adapters.documents.base import AbstractDocumentClient
from crpt_api.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter
from crpt_api.api.routes.documents import create_document
from crpt_api.core import rate_limit
from crpt_api.core.app_factory import create_app
from crpt_api.core.config import settings
from crpt_api.core.errors import InterruptedAppError, RemoteCallAppError
from crpt_api.core.rate_limit import get_document_service
from crpt_api.schemas.document import CreateDocumentRequest, CreateDocumentResponse
from crpt_api.services.document_service import DocumentService

VALID_BODY = {
    "document": {"doc_id": "42", "doc_type": "LP_INTRODUCE_GOODS"},
    "signature": "c2lnbmF0dXJl",
}


class StubClient(AbstractDocumentClient):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    def create_document(self, request: CreateDocumentRequest) -> CreateDocumentResponse:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return CreateDocumentResponse(http_status=201, remote_response={"value": request.document["doc_id"]})


@pytest.fixture
def app() -> FastAPI:
    return create_app()


def _override(app: FastAPI, service: DocumentService) -> TestClient:
    app.dependency_overrides[get_document_service] = lambda: service
    return TestClient(app)


def test_create_document_returns_201(app: FastAPI) -> None:
    stub = StubClient()
    limiter = SlidingWindowRateLimiter(limit=5, window_ms=1000)
    client = _override(app, DocumentService(limiter=limiter, client=stub))

    response = client.post("/v1/documents", json=VALID_BODY)

    assert response.status_code == 201
    assert response.json() == {"http_status": 201, "remote_response": {"value": "42"}}
    assert stub.calls == 1
    assert limiter.in_flight() == 1


def test_missing_signature_is_rejected_before_submission(app: FastAPI) -> None:
    stub = StubClient()
    limiter = SlidingWindowRateLimiter(limit=5, window_ms=1000)
    client = _override(app, DocumentService(limiter=limiter, client=stub))

    response = client.post("/v1/documents", json={"document": {"doc_id": "1"}})

    assert response.status_code == 422
    assert stub.calls == 0
    assert limiter.in_flight() == 0


def test_remote_failure_maps_to_502(app: FastAPI) -> None:
    error = RemoteCallAppError(
        code="remote_call_failed",
        message="API error: 500",
        details={"http_status": 500, "body": "internal"},
    )
    limiter = SlidingWindowRateLimiter(limit=5, window_ms=1000)
    client = _override(app, DocumentService(limiter=limiter, client=StubClient(error)))

    response = client.post("/v1/documents", json=VALID_BODY)

    assert response.status_code == 502
    data = response.json()
    assert data["error"]["code"] == "remote_call_failed"
    assert data["error"]["details"]["http_status"] == 500
    assert limiter.in_flight() == 1


def test_wait_ceiling_maps_to_429_with_retry_after(app: FastAPI) -> None:
    limiter = SlidingWindowRateLimiter(limit=1, window_ms=10_000)
    service = DocumentService(limiter=limiter, client=StubClient(), max_wait_seconds=0.05)
    client = _override(app, service)

    assert client.post("/v1/documents", json=VALID_BODY).status_code == 201
    response = client.post("/v1/documents", json=VALID_BODY)

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "rate_limit_timeout"
    assert int(response.headers["Retry-After"]) >= 1


def test_health_reports_rate_limit(app: FastAPI) -> None:
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["rate_limit"]["limit"] == settings.app.rate_limit_requests
    assert data["rate_limit"]["window_ms"] == settings.app.rate_limit_time_unit.millis


class DisconnectedRequest:
    """Stand-in for a request whose client has already gone away."""

    url = SimpleNamespace(path="/v1/documents")

    async def is_disconnected(self) -> bool:
        return True


def test_client_disconnect_cancels_wait_without_submitting() -> None:
    stub = StubClient()
    limiter = SlidingWindowRateLimiter(limit=1, window_ms=10_000)
    limiter.acquire()
    service = DocumentService(limiter=limiter, client=stub)
    body = CreateDocumentRequest(**VALID_BODY)

    with pytest.raises(InterruptedAppError) as exc_info:
        asyncio.run(create_document(body, DisconnectedRequest(), service))

    assert exc_info.value.code == "rate_limit_interrupted"
    assert stub.calls == 0
    assert limiter.in_flight() == 1


def test_missing_auth_token_maps_to_500(app: FastAPI, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.crpt, "auth_token", "")
    monkeypatch.setattr(rate_limit, "_service", None)
    client = TestClient(app)

    response = client.post("/v1/documents", json=VALID_BODY)

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "crpt_missing_auth_token"
