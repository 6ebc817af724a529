"""Document client adapter layer - abstracts over the transport to the remote API."""

from crpt_api.adapters.documents.base import AbstractDocumentClient
from crpt_api.adapters.documents.factory import create_document_client
from crpt_api.adapters.documents.http_client import HttpDocumentClient

__all__ = [
    "AbstractDocumentClient",
    "HttpDocumentClient",
    "create_document_client",
]
