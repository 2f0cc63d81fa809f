"""
FastAPI application entrypoint for the chat translator bot.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from chattranslator.api.cors import cors_middleware
from chattranslator.api.routes import router as api_router
from chattranslator.core.config import AppSettings, get_settings
from chattranslator.core.errors import (
    AuthError,
    ChatTranslatorError,
    RequestValidationFailure,
)
from chattranslator.core.logging import configure_logging
from chattranslator.dependencies import AppContext, build_app_context

logger = logging.getLogger(__name__)


async def _validation_failure(request: Request, exc: RequestValidationFailure) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=400)


async def _auth_failure(request: Request, exc: AuthError) -> PlainTextResponse:
    return PlainTextResponse("Unauthorized", status_code=401)


async def _server_failure(request: Request, exc: ChatTranslatorError) -> PlainTextResponse:
    logger.error(
        "%s failed with %s: %s",
        request.url.path,
        type(exc).__name__,
        exc,
        exc_info=exc,
    )
    return PlainTextResponse("Internal Server Error", status_code=500)


def create_app(
    context: Optional[AppContext] = None, settings: Optional[AppSettings] = None
) -> FastAPI:
    """
    Factory for the FastAPI application.

    A prebuilt ``context`` is used as is; otherwise the production context is
    built on startup. Either way it is closed on shutdown.
    """
    if context is not None:
        settings = context.settings
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.context is None:
            app.state.context = build_app_context(settings)
        try:
            yield
        finally:
            await app.state.context.aclose()

    app = FastAPI(
        title="Chat Translator Bot",
        version="0.1.0",
        description="Translation, Twitch account linking and bot chat delivery.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context = context

    app.middleware("http")(cors_middleware)
    app.add_exception_handler(RequestValidationFailure, _validation_failure)
    app.add_exception_handler(AuthError, _auth_failure)
    app.add_exception_handler(ChatTranslatorError, _server_failure)
    app.include_router(api_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
