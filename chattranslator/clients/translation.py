"""Client wrapper for the Cloud Translation v3 API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, Dict, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import translate_v3 as translate

from chattranslator.core.config import GoogleCloudSettings
from chattranslator.core.errors import (
    ConfigurationError,
    InvalidResponseError,
    UpstreamError,
)
from chattranslator.schemas import TranslateTextResult
from chattranslator.utils.validation import check_schema

logger = logging.getLogger(__name__)


class TranslationClient:
    """Translate short chat texts, optionally through a glossary."""

    def __init__(
        self,
        settings: GoogleCloudSettings,
        client: Optional[translate.TranslationServiceClient] = None,
    ) -> None:
        self._settings = settings
        self._client = client or translate.TranslationServiceClient()

    def _parent(self) -> str:
        if not self._settings.project_id:
            raise ConfigurationError("PROJECT_ID not provided")
        return f"projects/{self._settings.project_id}/locations/{self._settings.translate_location}"

    def default_glossary_config(self) -> Optional[Dict[str, Any]]:
        """Glossary config derived from settings, or ``None`` when unset."""
        glossary_id = self._settings.translate_glossary_id
        if not glossary_id:
            return None
        return {"glossary": f"{self._parent()}/glossaries/{glossary_id}"}

    async def translate(
        self,
        text: str,
        *,
        target_language_code: Optional[str] = None,
        glossary_config: Optional[Dict[str, Any]] = None,
    ) -> TranslateTextResult:
        """Translate ``text`` and return the first translation."""
        request: Dict[str, Any] = {
            "contents": [text],
            "parent": self._parent(),
            "mime_type": "text/plain",
            "target_language_code": target_language_code
            or self._settings.translate_target_language,
        }
        if glossary_config is not None:
            request["glossary_config"] = glossary_config

        try:
            response = await asyncio.to_thread(self._client.translate_text, request=request)
        except GoogleAPICallError as exc:  # pragma: no cover - network call
            raise UpstreamError(f"Translation call failed: {exc.message}") from exc

        return parse_translation_response(response, glossary=glossary_config is not None)


def parse_translation_response(response: Any, *, glossary: bool) -> TranslateTextResult:
    """Pick the first (glossary) translation, logging the raw response on failure."""
    if response is None:
        logger.error("Invalid translation response: %r", response)
        raise InvalidResponseError("Invalid response")

    translations = getattr(
        response, "glossary_translations" if glossary else "translations", None
    )
    if (
        not isinstance(translations, Sequence)
        or isinstance(translations, (str, bytes))
        or len(translations) == 0
    ):
        logger.error("Invalid translation response: %r", response)
        raise InvalidResponseError("Invalid response")

    first = translations[0]
    candidate: Dict[str, Any] = {
        "detected_language_code": getattr(first, "detected_language_code", None),
        "translated_text": getattr(first, "translated_text", None),
        "model": getattr(first, "model", None) or None,
    }
    glossary_name = getattr(getattr(first, "glossary_config", None), "glossary", None)
    if glossary_name:
        candidate["glossary_config"] = {"glossary": glossary_name}

    result = check_schema(TranslateTextResult, candidate)
    if not result.ok:
        logger.error("Invalid translation response: %r (%s)", response, result.error)
        raise InvalidResponseError("Invalid response")
    return result.value


__all__ = ["TranslationClient", "parse_translation_response"]
