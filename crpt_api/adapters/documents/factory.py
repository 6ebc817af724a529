"""Factory for creating document client instances."""

from crpt_api.adapters.documents.base import AbstractDocumentClient
from crpt_api.adapters.documents.http_client import HttpDocumentClient
from crpt_api.core.config import CrptSettings, settings
from crpt_api.core.errors import ConfigurationAppError


def create_document_client(crpt_settings: CrptSettings | None = None) -> AbstractDocumentClient:
    """Instantiate the document client from configuration.

    Reads configuration from crpt_api.core.config.settings unless explicit
    settings are given.

    Returns:
        AbstractDocumentClient: Configured client instance.

    Raises:
        ConfigurationAppError: If the auth token or base URL is missing.
    """
    cfg = crpt_settings or settings.crpt

    if not cfg.auth_token:
        raise ConfigurationAppError(
            code="crpt_missing_auth_token",
            message="Document API requires CRPT_AUTH_TOKEN environment variable",
        )
    if not cfg.base_url:
        raise ConfigurationAppError(
            code="crpt_missing_base_url",
            message="Document API requires CRPT_BASE_URL environment variable",
        )

    return HttpDocumentClient(
        base_url=cfg.base_url,
        documents_path=cfg.documents_path,
        auth_token=cfg.auth_token,
        timeout_seconds=cfg.timeout_seconds,
    )
