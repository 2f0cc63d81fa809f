"""
Lifecycle of the bot's Twitch access token.

The token lives in a single document keyed by the bot identity. A call to
``get_token`` reuses the stored token while it is valid, refreshes it once it
expires, and mints a new one when nothing is stored yet.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Dict, Optional

from chattranslator.clients import TwitchOAuthClient
from chattranslator.clients.store import CredentialStore
from chattranslator.core.config import StoreSettings, TwitchSettings
from chattranslator.core.errors import StorageError, WriteConflictError
from chattranslator.models.token import AccessTokenRecord, StoredRecord

logger = logging.getLogger(__name__)


class TwitchTokenService:
    """Mint, reuse or refresh the bot access token."""

    def __init__(
        self,
        store: CredentialStore,
        oauth_client: TwitchOAuthClient,
        twitch_settings: TwitchSettings,
        store_settings: StoreSettings,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._twitch = twitch_settings
        self._store_settings = store_settings
        self._refresh_window = timedelta(seconds=twitch_settings.refresh_window_seconds)
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def identity(self) -> str:
        return self._twitch.bot_identity

    def _lock_for(self, identity: str) -> asyncio.Lock:
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        return lock

    async def get_token(self) -> AccessTokenRecord:
        """
        Return a usable access token for the bot.

        Refreshes are serialized per bot identity inside the process and
        guarded by a version-checked write across processes. Losing a write
        race re-reads the record and adopts the winner's token when valid.
        """
        async with self._lock_for(self.identity):
            attempts = self._store_settings.max_conflict_retries + 1
            for attempt in range(1, attempts + 1):
                stored = await self._read()
                if stored is None:
                    logger.info("No stored token for %s; requesting a new one", self.identity)
                    token = await self._oauth.client_credentials()
                    expected_version = None
                else:
                    current = AccessTokenRecord.from_json(
                        stored.data.get(self._store_settings.token_field)
                    )
                    if not current.expired(self._refresh_window):
                        return current
                    logger.info("Token for %s expired at %s", self.identity, current.expires_at)
                    token = await self._renew(current)
                    expected_version = stored.version

                try:
                    await self._write(token, expected_version)
                except WriteConflictError:
                    logger.warning(
                        "Token for %s was written concurrently (attempt %d/%d); re-reading",
                        self.identity,
                        attempt,
                        attempts,
                    )
                    continue
                return token

        raise StorageError(
            f"Token for {self.identity} kept changing during {attempts} write attempts."
        )

    async def _renew(self, current: AccessTokenRecord) -> AccessTokenRecord:
        if current.refresh_token:
            return await self._oauth.refresh(current.refresh_token)
        # App access tokens carry no refresh token; a new grant replaces them.
        return await self._oauth.client_credentials()

    async def _read(self) -> Optional[StoredRecord]:
        return await asyncio.to_thread(
            self._store.get, self._store_settings.token_collection, self.identity
        )

    async def _write(self, token: AccessTokenRecord, expected_version: object) -> None:
        await asyncio.to_thread(
            self._store.compare_and_set,
            self._store_settings.token_collection,
            self.identity,
            {self._store_settings.token_field: token.to_json()},
            expected_version=expected_version,
        )


__all__ = ["TwitchTokenService"]
