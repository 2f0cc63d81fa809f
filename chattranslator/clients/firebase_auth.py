"""Firebase Auth wrapper for issuing custom tokens."""

from __future__ import annotations

import asyncio
from typing import Optional

import firebase_admin
from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from chattranslator.core.errors import UpstreamError
from chattranslator.utils.encoding import coerce_into_string


class CustomTokenIssuer:
    """Mint custom tokens a client SDK exchanges for a signed-in session."""

    def __init__(self, app: Optional[firebase_admin.App] = None) -> None:
        self._app = app

    async def create_custom_token(self, uid: str) -> str:
        try:
            token = await asyncio.to_thread(auth.create_custom_token, uid, app=self._app)
        except (FirebaseError, ValueError) as exc:  # pragma: no cover - network call
            raise UpstreamError(f"Custom token could not be created: {exc}") from exc
        return coerce_into_string(token)


__all__ = ["CustomTokenIssuer"]
