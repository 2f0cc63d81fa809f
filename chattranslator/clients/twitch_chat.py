"""
Twitch chat delivery over IRC.

The bot keeps one authenticated IRC session per process. It is opened on
first use, reused for every outgoing message, reopened when the connection
dropped or the bot token changed, and closed on application shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

import pydle

from chattranslator.core.config import TwitchSettings
from chattranslator.core.errors import ChatDeliveryError
from chattranslator.models.token import AccessTokenRecord

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[AccessTokenRecord]]


class BotIrcClient(pydle.Client):
    """pydle client that signals when Twitch accepted the registration."""

    # Reconnects are driven by TwitchChatSession on the next send.
    RECONNECT_ON_ERROR = False

    def __init__(self, nickname: str, **kwargs) -> None:
        super().__init__(nickname, realname=nickname, **kwargs)
        self._registered = asyncio.Event()

    async def open_session(
        self, *, hostname: str, port: int, tls: bool, password: str, timeout: float
    ) -> None:
        await self.connect(hostname=hostname, port=port, tls=tls, password=password)
        await asyncio.wait_for(self._registered.wait(), timeout=timeout)

    async def on_connect(self) -> None:
        await super().on_connect()
        self._registered.set()
        logger.info("IRC session registered as %s", self.nickname)

    async def on_disconnect(self, expected: bool) -> None:
        self._registered.clear()
        if not expected:
            logger.warning("IRC session dropped unexpectedly")
        await super().on_disconnect(expected)


ClientFactory = Callable[[str], BotIrcClient]


class TwitchChatSession:
    """Long-lived chat session for the bot identity."""

    def __init__(
        self,
        settings: TwitchSettings,
        token_provider: TokenProvider,
        *,
        client_factory: ClientFactory = BotIrcClient,
    ) -> None:
        self._settings = settings
        self._token_provider = token_provider
        self._client_factory = client_factory
        self._client: Optional[BotIrcClient] = None
        self._session_token: Optional[str] = None
        self._channels: Set[str] = set()
        self._lock = asyncio.Lock()

    async def send(self, login: str, text: str) -> None:
        """Join ``#login`` if needed and post ``text`` as the bot."""
        channel = f"#{login.lower()}"
        async with self._lock:
            token = await self._token_provider()
            client = await self._acquire(token.access_token)
            try:
                if channel not in self._channels:
                    await client.join(channel)
                    self._channels.add(channel)
                await client.message(channel, text)
            except (ConnectionError, OSError) as exc:
                logger.error("Failed to deliver message to %s: %s", channel, exc)
                await self._release()
                raise ChatDeliveryError(f"Message to {channel} was not delivered") from exc
        logger.info("Delivered message to %s", channel)

    async def aclose(self) -> None:
        async with self._lock:
            await self._release()

    async def _acquire(self, access_token: str) -> BotIrcClient:
        client = self._client
        if client is not None and client.connected and self._session_token == access_token:
            return client

        if client is not None:
            logger.info("Reopening IRC session")
            await self._release()

        client = self._client_factory(self._settings.bot_username.lower())
        try:
            await client.open_session(
                hostname=self._settings.irc_host,
                port=self._settings.irc_port,
                tls=self._settings.irc_tls,
                password=f"oauth:{access_token}",
                timeout=self._settings.irc_connect_timeout,
            )
        except (ConnectionError, OSError, asyncio.TimeoutError) as exc:
            logger.error("IRC session could not be opened: %s", exc)
            await self._disconnect(client)
            raise ChatDeliveryError("Chat session could not be opened") from exc

        self._client = client
        self._session_token = access_token
        return client

    async def _release(self) -> None:
        client, self._client = self._client, None
        self._session_token = None
        self._channels.clear()
        if client is not None:
            await self._disconnect(client)

    @staticmethod
    async def _disconnect(client: BotIrcClient) -> None:
        if not client.connected:
            return
        try:
            await client.disconnect(expected=True)
        except (ConnectionError, OSError) as exc:
            logger.warning("IRC session did not close cleanly: %s", exc)


__all__ = ["BotIrcClient", "TwitchChatSession", "TokenProvider"]
