"""Twitch Helix client used to resolve a user token to its login."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from chattranslator.core.config import TwitchSettings
from chattranslator.core.errors import InvalidResponseError, UpstreamError
from chattranslator.schemas import TwitchUsersResponse
from chattranslator.utils.validation import check_schema

logger = logging.getLogger(__name__)


class TwitchHelixClient:
    """Thin wrapper over the Helix REST API."""

    def __init__(
        self,
        settings: TwitchSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def get_login(self, user_token: str) -> str:
        """Return the login of the account that owns ``user_token``."""
        headers = {
            "Authorization": f"Bearer {user_token}",
            "Client-Id": self._settings.client_id,
        }
        url = f"{self._settings.helix_base_url.rstrip('/')}/users"
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Twitch users request failed: {exc}") from exc

        if not response.is_success:
            logger.error(
                "Twitch login could not be retrieved (%s): %s",
                response.status_code,
                response.text,
            )
            raise UpstreamError("Twitch login could not be retrieved!")

        try:
            payload = response.json()
        except ValueError:
            payload = None
        result = check_schema(TwitchUsersResponse, payload)
        if not result.ok or not result.value.data:
            logger.error("Invalid Twitch users response: %s", response.text)
            raise InvalidResponseError("Invalid response")
        return result.value.data[0].login


__all__ = ["TwitchHelixClient"]
