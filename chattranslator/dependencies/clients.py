"""
Construction of the shared client context and its FastAPI dependency.

Every external handle is built once per process by ``build_app_context`` and
stored on ``app.state``; handlers receive it by reference through
``get_app_context`` instead of reaching for module-level singletons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import firebase_admin
from fastapi import Request
from firebase_admin import firestore as firebase_firestore

from chattranslator.clients import (
    ChatSender,
    CredentialStore,
    CustomTokenIssuer,
    CustomTokenMinter,
    FirestoreStore,
    LoginResolver,
    SQLiteStore,
    SecretManagerClient,
    TranslationClient,
    Translator,
    TwitchChatSession,
    TwitchHelixClient,
    TwitchOAuthClient,
)
from chattranslator.core.config import AppSettings
from chattranslator.core.errors import ConfigurationError
from chattranslator.services import (
    IdentityAssertionGate,
    SharedTokenVerifier,
    TwitchTokenService,
    UserLoginService,
)

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Every collaborator a request handler may need."""

    settings: AppSettings
    store: CredentialStore
    token_service: TwitchTokenService
    translation: Translator
    helix: LoginResolver
    chat: ChatSender
    custom_tokens: CustomTokenMinter
    identity_gate: IdentityAssertionGate
    token_verifier: SharedTokenVerifier
    user_logins: UserLoginService

    async def aclose(self) -> None:
        """Release long-lived connections."""
        await self.chat.aclose()


def _initialize_firebase(settings: AppSettings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        options = {}
        if settings.google.project_id:
            options["projectId"] = settings.google.project_id
        return firebase_admin.initialize_app(options=options)


def build_store(settings: AppSettings, firebase_app: firebase_admin.App) -> CredentialStore:
    backend = settings.store.backend.lower()
    if backend == "sqlite":
        return SQLiteStore(settings.store.sqlite_path)
    if backend == "firestore":
        return FirestoreStore(firebase_firestore.client(firebase_app))
    raise ConfigurationError(f"Unknown credential store backend: {settings.store.backend}")


def build_app_context(settings: AppSettings) -> AppContext:
    """Wire the production clients."""
    firebase_app = _initialize_firebase(settings)
    store = build_store(settings, firebase_app)
    secrets = SecretManagerClient(settings.google)
    oauth_client = TwitchOAuthClient(settings.twitch, secrets.fetch_secret)
    token_service = TwitchTokenService(
        store=store,
        oauth_client=oauth_client,
        twitch_settings=settings.twitch,
        store_settings=settings.store,
    )
    logger.info("Client context ready (store backend: %s)", settings.store.backend)
    return AppContext(
        settings=settings,
        store=store,
        token_service=token_service,
        translation=TranslationClient(settings.google),
        helix=TwitchHelixClient(settings.twitch),
        chat=TwitchChatSession(settings.twitch, token_service.get_token),
        custom_tokens=CustomTokenIssuer(firebase_app),
        identity_gate=IdentityAssertionGate(settings.identity_assertion_header),
        token_verifier=SharedTokenVerifier(store, settings.store),
        user_logins=UserLoginService(store, settings.store),
    )


def get_app_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context built at startup."""
    return request.app.state.context


__all__ = ["AppContext", "build_app_context", "build_store", "get_app_context"]
