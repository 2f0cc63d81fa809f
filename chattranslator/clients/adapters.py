"""Interfaces the request handlers rely on, one per external service."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from chattranslator.schemas import TranslateTextResult


@runtime_checkable
class Translator(Protocol):
    def default_glossary_config(self) -> Optional[Dict[str, Any]]: ...

    async def translate(
        self,
        text: str,
        *,
        target_language_code: Optional[str] = None,
        glossary_config: Optional[Dict[str, Any]] = None,
    ) -> TranslateTextResult: ...


@runtime_checkable
class LoginResolver(Protocol):
    async def get_login(self, user_token: str) -> str: ...


@runtime_checkable
class ChatSender(Protocol):
    """Posts into ``#login`` as the bot; ``aclose`` ends the session."""

    async def send(self, login: str, text: str) -> None: ...

    async def aclose(self) -> None: ...


@runtime_checkable
class CustomTokenMinter(Protocol):
    async def create_custom_token(self, uid: str) -> str: ...


__all__ = ["ChatSender", "CustomTokenMinter", "LoginResolver", "Translator"]
