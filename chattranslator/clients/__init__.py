"""Expose constructed client wrappers."""

from .adapters import ChatSender, CustomTokenMinter, LoginResolver, Translator
from .firebase_auth import CustomTokenIssuer
from .firestore_store import FirestoreStore
from .secret_manager import SecretManagerClient
from .sqlite_store import SQLiteStore
from .store import CredentialStore
from .translation import TranslationClient
from .twitch_chat import BotIrcClient, TwitchChatSession
from .twitch_helix import TwitchHelixClient
from .twitch_oauth import TwitchOAuthClient

__all__ = [
    "BotIrcClient",
    "ChatSender",
    "CredentialStore",
    "CustomTokenIssuer",
    "CustomTokenMinter",
    "FirestoreStore",
    "LoginResolver",
    "SQLiteStore",
    "SecretManagerClient",
    "TranslationClient",
    "Translator",
    "TwitchChatSession",
    "TwitchHelixClient",
    "TwitchOAuthClient",
]
