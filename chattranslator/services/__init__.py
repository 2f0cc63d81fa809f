"""Service layer exports."""

from .auth_gate import IdentityAssertionGate, SharedTokenVerifier
from .twitch_tokens import TwitchTokenService
from .user_logins import UserLoginService

__all__ = [
    "IdentityAssertionGate",
    "SharedTokenVerifier",
    "TwitchTokenService",
    "UserLoginService",
]
