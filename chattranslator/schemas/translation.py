"""Schemas for text translation results."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TranslateTextResult(BaseModel):
    """First translation of a request, serialized in camelCase for the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    detected_language_code: str = Field(..., min_length=1)
    translated_text: str = Field(..., min_length=1)
    model: Optional[str] = None
    glossary_config: Optional[Dict[str, Any]] = None


__all__ = ["TranslateTextResult"]
