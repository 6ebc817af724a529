"""Tests for the HTTP document client adapter using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from crpt_api.adapters.documents import HttpDocumentClient, create_document_client
from crpt_api.core.config import CrptSettings
from crpt_api.core.errors import ConfigurationAppError, RemoteCallAppError
from crpt_api.schemas.document import CreateDocumentRequest

DOCUMENTS_PATH = "/api/v3/lk/documents/create"


def _client(handler) -> HttpDocumentClient:
    return HttpDocumentClient(
        base_url="https://crpt.test",
        documents_path=DOCUMENTS_PATH,
        auth_token="secret-token",
        transport=httpx.MockTransport(handler),
    )


def _request() -> CreateDocumentRequest:
    return CreateDocumentRequest(
        document={"doc_type": "LP_INTRODUCE_GOODS", "products": [{"uit_code": "01"}]},
        signature="c2lnbmF0dXJl",
    )


def test_posts_json_body_with_bearer_token() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"value": "doc-42"})

    with _client(handler) as client:
        result = client.create_document(_request())

    assert seen["method"] == "POST"
    assert seen["url"] == "https://crpt.test/api/v3/lk/documents/create"
    assert seen["auth"] == "Bearer secret-token"
    assert seen["content_type"] == "application/json"
    assert seen["body"] == {
        "document": {"doc_type": "LP_INTRODUCE_GOODS", "products": [{"uit_code": "01"}]},
        "signature": "c2lnbmF0dXJl",
    }
    assert result.http_status == 201
    assert result.remote_response == {"value": "doc-42"}


def test_accepts_200_with_empty_body() -> None:
    client = _client(lambda request: httpx.Response(200))

    result = client.create_document(_request())

    assert result.http_status == 200
    assert result.remote_response is None


def test_non_json_success_body_is_returned_as_text() -> None:
    client = _client(lambda request: httpx.Response(200, text="accepted"))

    assert client.create_document(_request()).remote_response == "accepted"


@pytest.mark.parametrize("status_code", [400, 401, 429, 500, 503])
def test_unexpected_status_raises_remote_call_error(status_code: int) -> None:
    client = _client(lambda request: httpx.Response(status_code, text="nope"))

    with pytest.raises(RemoteCallAppError) as exc_info:
        client.create_document(_request())

    error = exc_info.value
    assert error.code == "remote_call_failed"
    assert error.status_code == status_code
    assert error.body == "nope"
    assert str(status_code) in error.message


def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(RemoteCallAppError) as exc_info:
        client.create_document(_request())

    assert exc_info.value.code == "remote_transport_error"
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_factory_requires_auth_token() -> None:
    with pytest.raises(ConfigurationAppError) as exc_info:
        create_document_client(CrptSettings(auth_token=""))

    assert exc_info.value.code == "crpt_missing_auth_token"


def test_factory_builds_http_client_from_settings() -> None:
    client = create_document_client(
        CrptSettings(base_url="https://crpt.test", auth_token="abc", timeout_seconds=5)
    )
    try:
        assert isinstance(client, HttpDocumentClient)
        assert client.documents_path == DOCUMENTS_PATH
        assert client.client.headers["Authorization"] == "Bearer abc"
    finally:
        client.close()
