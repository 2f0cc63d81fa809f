"""Client wrapper for reading versioned secrets from Google Secret Manager."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import secretmanager

from chattranslator.core.config import GoogleCloudSettings
from chattranslator.core.errors import (
    ConfigurationError,
    SecretNotFoundError,
    UpstreamError,
)
from chattranslator.utils.encoding import coerce_into_string

logger = logging.getLogger(__name__)


class SecretManagerClient:
    """Fetch secret payloads, defaulting to the Twitch client secret."""

    def __init__(
        self,
        settings: GoogleCloudSettings,
        client: Optional[secretmanager.SecretManagerServiceClient] = None,
    ) -> None:
        self._settings = settings
        self._client = client or secretmanager.SecretManagerServiceClient()

    def secret_path(self, name: str, version: str) -> str:
        if not self._settings.project_id:
            raise ConfigurationError("PROJECT_ID not provided")
        return f"projects/{self._settings.project_id}/secrets/{name}/versions/{version}"

    async def fetch_secret(
        self, name: Optional[str] = None, version: Optional[str] = None
    ) -> str:
        """Return the secret payload decoded as UTF-8."""
        path = self.secret_path(
            name or self._settings.client_secret_name,
            version or self._settings.client_secret_version,
        )

        def _invoke():
            return self._client.access_secret_version(request={"name": path})

        try:
            response = await asyncio.to_thread(_invoke)
        except GoogleAPICallError as exc:  # pragma: no cover - network call
            raise UpstreamError(f"Secret Manager call failed: {exc.message}") from exc

        payload = getattr(response, "payload", None)
        data = getattr(payload, "data", None) if payload is not None else None
        if not data:
            logger.error("Secret %s returned no payload", path)
            raise SecretNotFoundError(f"Secret {path} has no payload.")
        return coerce_into_string(data)


__all__ = ["SecretManagerClient"]
