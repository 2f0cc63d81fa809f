"""
Application configuration models and helpers.

Centralizes settings management so the request handlers and the long-lived
client context share one configuration surface.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_SETTINGS_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


def _env(name: str) -> AliasChoices:
    return AliasChoices(name, name.lower())


class TwitchSettings(BaseSettings):
    """Configuration for the Twitch identity provider and chat network."""

    model_config = _SETTINGS_CONFIG

    client_id: str = Field(
        "39jqiicnwfja9cefwut98bi59727fm",
        validation_alias=_env("TWITCH_CLIENT_ID"),
    )
    bot_username: str = Field(
        "chattranslatorbot",
        validation_alias=_env("TWITCH_BOT_USERNAME"),
        description="Login of the bot account that posts into user channels.",
    )
    bot_identity: str = Field(
        "server",
        validation_alias=_env("TWITCH_BOT_IDENTITY"),
        description="Document id of the persisted bot access token.",
    )
    token_host: str = Field("https://id.twitch.tv", validation_alias=_env("TWITCH_TOKEN_HOST"))
    token_path: str = Field("/oauth2/token", validation_alias=_env("TWITCH_TOKEN_PATH"))
    helix_base_url: str = Field(
        "https://api.twitch.tv/helix", validation_alias=_env("TWITCH_HELIX_BASE_URL")
    )
    scope: str = Field("chat:write", validation_alias=_env("TWITCH_SCOPE"))
    refresh_window_seconds: int = Field(
        300,
        validation_alias=_env("TWITCH_REFRESH_WINDOW"),
        description="Treat tokens expiring within this window as already expired.",
    )
    irc_host: str = Field("irc.chat.twitch.tv", validation_alias=_env("TWITCH_IRC_HOST"))
    irc_port: int = Field(6697, validation_alias=_env("TWITCH_IRC_PORT"))
    irc_tls: bool = Field(True, validation_alias=_env("TWITCH_IRC_TLS"))
    irc_connect_timeout: float = Field(
        10.0, validation_alias=_env("TWITCH_IRC_CONNECT_TIMEOUT")
    )


class GoogleCloudSettings(BaseSettings):
    """Settings for the Google Cloud services fronted by the handlers."""

    model_config = _SETTINGS_CONFIG

    project_id: Optional[str] = Field(
        None,
        validation_alias=_env("PROJECT_ID"),
        description="Owning project. Required by handlers that call Google APIs.",
    )
    client_secret_name: str = Field(
        "twitch-client-secret", validation_alias=_env("TWITCH_CLIENT_SECRET_NAME")
    )
    client_secret_version: str = Field(
        "1", validation_alias=_env("TWITCH_CLIENT_SECRET_VERSION")
    )
    translate_location: str = Field(
        "global", validation_alias=_env("TRANSLATE_LOCATION")
    )
    translate_target_language: str = Field(
        "en", validation_alias=_env("TRANSLATE_TARGET_LANGUAGE")
    )
    translate_glossary_id: Optional[str] = Field(
        None,
        validation_alias=_env("TRANSLATE_GLOSSARY_ID"),
        description="Optional glossary; switches results to glossary translations.",
    )


class StoreSettings(BaseSettings):
    """Persistence configuration for credential and user records."""

    model_config = _SETTINGS_CONFIG

    backend: str = Field(
        "firestore",
        validation_alias=_env("CREDENTIAL_STORE_BACKEND"),
        description="Either 'firestore' or 'sqlite'.",
    )
    sqlite_path: str = Field(
        "data/credentials.db", validation_alias=_env("CREDENTIAL_STORE_SQLITE_PATH")
    )
    token_collection: str = Field(
        "twitchAccessToken", validation_alias=_env("TOKEN_COLLECTION")
    )
    token_field: str = Field("accessTokenJson", validation_alias=_env("TOKEN_FIELD"))
    login_collection: str = Field(
        "userTwitchLogin", validation_alias=_env("LOGIN_COLLECTION")
    )
    users_collection: str = Field("users", validation_alias=_env("USERS_COLLECTION"))
    max_conflict_retries: int = Field(
        3, validation_alias=_env("TOKEN_WRITE_CONFLICT_RETRIES")
    )


class CorsSettings(BaseSettings):
    """Cross-origin policy applied to every route."""

    model_config = _SETTINGS_CONFIG

    production_origin: str = Field(
        "https://chattalker.web.app", validation_alias=_env("CORS_PRODUCTION_ORIGIN")
    )
    allow_methods: str = Field("GET", validation_alias=_env("CORS_ALLOW_METHODS"))
    allow_headers: str = Field(
        "Authorization", validation_alias=_env("CORS_ALLOW_HEADERS")
    )
    max_age_seconds: int = Field(3600, validation_alias=_env("CORS_MAX_AGE"))


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _SETTINGS_CONFIG

    log_level: str = Field("INFO", validation_alias=_env("APP_LOG_LEVEL"))
    identity_assertion_header: str = Field(
        "X-Upstream-Identity-Assertion",
        validation_alias=_env("IDENTITY_ASSERTION_HEADER"),
        description="Header carrying the perimeter-validated identity claims.",
    )
    twitch: TwitchSettings = Field(default_factory=TwitchSettings)
    google: GoogleCloudSettings = Field(default_factory=GoogleCloudSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "CorsSettings",
    "GoogleCloudSettings",
    "StoreSettings",
    "TwitchSettings",
    "get_settings",
]
