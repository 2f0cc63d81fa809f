"""Public schema exports."""

from .translation import TranslateTextResult
from .twitch import TwitchTokenGrant, TwitchUsersData, TwitchUsersResponse

__all__ = [
    "TranslateTextResult",
    "TwitchTokenGrant",
    "TwitchUsersData",
    "TwitchUsersResponse",
]
