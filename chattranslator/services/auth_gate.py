"""
Caller authentication for the request handlers.

Two independent mechanisms live here:

* ``IdentityAssertionGate`` trusts a base64 JSON claim set forwarded by the
  API gateway. The gateway has already verified the caller's ID token; this
  service only decodes what it was handed. Anything that can reach the
  service without going through the gateway can forge this header, so the
  gateway is the authentication boundary, not this module.
* ``SharedTokenVerifier`` compares a caller-supplied token with the one
  pre-provisioned for that uid.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import hmac
import json
import logging
from typing import Any, Mapping, Optional

from chattranslator.clients.store import CredentialStore
from chattranslator.core.config import StoreSettings
from chattranslator.core.errors import (
    AuthError,
    ConfigurationError,
    MalformedAssertionError,
)

logger = logging.getLogger(__name__)

_SUBJECT_CLAIMS = ("sub", "subject")


def _b64decode(value: str) -> bytes:
    cleaned = value.strip()
    padded = cleaned + "=" * (-len(cleaned) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=False)


class IdentityAssertionGate:
    """Extract the subject from the perimeter-validated assertion header."""

    def __init__(self, header_name: str) -> None:
        self.header_name = header_name

    def subject_from_headers(self, headers: Mapping[str, str]) -> str:
        raw = headers.get(self.header_name)
        if raw is None:
            logger.info("%s missing", self.header_name)
            raise AuthError(f"{self.header_name} missing")
        return self.decode_subject(raw)

    @staticmethod
    def decode_subject(raw: str) -> str:
        try:
            claims: Any = json.loads(_b64decode(raw).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error("Undecodable identity assertion: %s", raw)
            raise MalformedAssertionError("Invalid identity assertion") from exc

        subject: Optional[Any] = None
        if isinstance(claims, dict):
            subject = next(
                (claims[name] for name in _SUBJECT_CLAIMS if name in claims), None
            )
        if not isinstance(subject, str) or not subject:
            logger.error("Identity assertion without subject: %s", claims)
            raise MalformedAssertionError("Invalid identity assertion")
        return subject


class SharedTokenVerifier:
    """Check a caller token against the expected token stored for its uid."""

    def __init__(self, store: CredentialStore, store_settings: StoreSettings) -> None:
        self._store = store
        self._settings = store_settings

    async def verify(self, uid: str, token: str) -> None:
        record = await asyncio.to_thread(
            self._store.get, self._settings.users_collection, uid
        )
        if record is None:
            raise ConfigurationError(f"Record could not be fetched for {uid}")
        expected = record.data.get("token")
        if not isinstance(expected, str) or not expected:
            raise ConfigurationError(f"token not found for {uid}")
        if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
            raise AuthError("Token mismatch")


__all__ = ["IdentityAssertionGate", "SharedTokenVerifier"]
