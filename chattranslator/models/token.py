"""
Domain models for the persisted bot access token.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from chattranslator.core.errors import MalformedRecordError


class AccessTokenRecord(BaseModel):
    """Token bundle returned by the identity provider and stored verbatim."""

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime
    scope: Union[List[str], str, None] = None

    @field_validator("expires_at")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_grant(
        cls, payload: Dict[str, Any], *, issued_at: Optional[datetime] = None
    ) -> "AccessTokenRecord":
        """Build a record from a token endpoint response."""
        issued_at = issued_at or datetime.now(timezone.utc)
        expires_in = int(payload["expires_in"])
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type", "bearer"),
            expires_in=expires_in,
            expires_at=issued_at + timedelta(seconds=expires_in),
            scope=payload.get("scope"),
        )

    @classmethod
    def from_json(cls, raw: Any) -> "AccessTokenRecord":
        """Deserialize a stored record, rejecting anything unreadable."""
        if not isinstance(raw, str):
            raise MalformedRecordError("Stored access token is not a JSON string.")
        try:
            return cls.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise MalformedRecordError("Stored access token could not be parsed.") from exc

    def to_json(self) -> str:
        return self.model_dump_json()

    def expired(self, window: timedelta = timedelta(0), *, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now + window


class StoredRecord(BaseModel):
    """A document read from the credential store along with its write version."""

    data: Dict[str, Any] = Field(default_factory=dict)
    version: Any = Field(
        None, description="Opaque token used for version-checked writes."
    )


__all__ = ["AccessTokenRecord", "StoredRecord"]
