"""Schemas for Twitch identity provider and Helix responses."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field


class TwitchTokenGrant(BaseModel):
    """Body of a successful ``POST /oauth2/token``."""

    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(..., gt=0)
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    scope: Union[List[str], str, None] = None


class TwitchUsersData(BaseModel):
    """A single entry of ``GET /helix/users``."""

    login: str = Field(..., min_length=1)


class TwitchUsersResponse(BaseModel):
    """Envelope returned by ``GET /helix/users``."""

    data: List[TwitchUsersData]


__all__ = ["TwitchTokenGrant", "TwitchUsersData", "TwitchUsersResponse"]
