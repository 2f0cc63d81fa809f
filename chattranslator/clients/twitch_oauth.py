"""
Twitch OAuth utilities.

These helpers perform the grant calls behind the bot token lifecycle.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from fastapi import status

from chattranslator.core.config import TwitchSettings
from chattranslator.core.errors import TokenAcquisitionError
from chattranslator.models.token import AccessTokenRecord
from chattranslator.schemas import TwitchTokenGrant
from chattranslator.utils.validation import check_schema

logger = logging.getLogger(__name__)

SecretLoader = Callable[[], Awaitable[str]]


class TwitchOAuthClient:
    """Exchange client credentials or refresh tokens for bot access tokens."""

    def __init__(
        self,
        settings: TwitchSettings,
        secret_loader: SecretLoader,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._secret_loader = secret_loader
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"{self._settings.token_host.rstrip('/')}{self._settings.token_path}"

    async def client_credentials(self, scope: Optional[str] = None) -> AccessTokenRecord:
        """Mint a new app access token for the configured scope."""
        return await self._grant(
            {
                "grant_type": "client_credentials",
                "scope": scope or self._settings.scope,
            }
        )

    async def refresh(
        self, refresh_token: str, scope: Optional[str] = None
    ) -> AccessTokenRecord:
        """Refresh the access token using a stored refresh token."""
        return await self._grant(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "scope": scope or self._settings.scope,
            }
        )

    async def _grant(self, params: Dict[str, Any]) -> AccessTokenRecord:
        payload = {
            "client_id": self._settings.client_id,
            "client_secret": await self._secret_loader(),
            **params,
        }
        issued_at = datetime.now(timezone.utc)
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.post(self.token_url, data=payload)
        except httpx.HTTPError as exc:
            raise TokenAcquisitionError(
                f"{params['grant_type']} grant request failed: {exc}"
            ) from exc

        if response.status_code != status.HTTP_200_OK:
            logger.error(
                "Twitch %s grant rejected (%s): %s",
                params["grant_type"],
                response.status_code,
                response.text,
            )
            raise TokenAcquisitionError(response.text)

        try:
            token_payload = response.json()
        except ValueError:
            token_payload = None
        result = check_schema(TwitchTokenGrant, token_payload)
        if not result.ok:
            logger.error("Invalid token payload from Twitch: %s", response.text)
            raise TokenAcquisitionError("Invalid token payload returned from Twitch.")

        return AccessTokenRecord.from_grant(
            result.value.model_dump(exclude_none=True), issued_at=issued_at
        )


__all__ = ["SecretLoader", "TwitchOAuthClient"]
