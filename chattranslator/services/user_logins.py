"""Mapping between application users and their Twitch login."""

from __future__ import annotations

import asyncio
import logging

from chattranslator.clients.store import CredentialStore
from chattranslator.core.config import StoreSettings
from chattranslator.core.errors import MalformedRecordError

logger = logging.getLogger(__name__)


class UserLoginService:
    """Read and write ``uid -> login`` documents."""

    def __init__(self, store: CredentialStore, store_settings: StoreSettings) -> None:
        self._store = store
        self._settings = store_settings

    async def get_login(self, uid: str) -> str:
        record = await asyncio.to_thread(
            self._store.get, self._settings.login_collection, uid
        )
        login = record.data.get("login") if record is not None else None
        if not isinstance(login, str) or not login:
            logger.error("Invalid %s record for %s: %s", self._settings.login_collection, uid, record)
            raise MalformedRecordError(f"Invalid {self._settings.login_collection}")
        return login

    async def set_login(self, uid: str, login: str) -> None:
        await asyncio.to_thread(
            self._store.set, self._settings.login_collection, uid, {"login": login}
        )
        logger.info("Linked %s to Twitch login %s", uid, login)


__all__ = ["UserLoginService"]
