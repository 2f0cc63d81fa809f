"""
FastAPI routes for the chat translator bot.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from chattranslator.core.errors import AuthError, RequestValidationFailure
from chattranslator.dependencies import AppContext, ProjectIdDependency, get_app_context

router = APIRouter()
logger = logging.getLogger(__name__)

ContextDependency = Annotated[AppContext, Depends(get_app_context)]


def _require_query_string(request: Request, name: str) -> str:
    """Return the single string value of ``name`` or fail with ``Invalid <name>``."""
    values = request.query_params.getlist(name)
    if len(values) != 1:
        logger.info(
            "Rejected query for %s: %s given %d times (params: %s)",
            request.url.path,
            name,
            len(values),
            sorted(request.query_params.keys()),
        )
        raise RequestValidationFailure(f"Invalid {name}")
    return values[0]


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/translate-text")
async def translate_text(
    request: Request,
    context: ContextDependency,
    project_id: str = ProjectIdDependency,
) -> Response:
    """Translate ``text`` into the configured target language."""
    if request.query_params.getlist("keepAlive") == ["true"]:
        return Response(status_code=HTTPStatus.NO_CONTENT)
    text = _require_query_string(request, "text")

    result = await context.translation.translate(
        text, glossary_config=context.translation.default_glossary_config()
    )
    return JSONResponse(content=result.model_dump(by_alias=True, exclude_none=True))


@router.get("/send-text-from-bot-to-chat")
async def send_text_from_bot_to_chat(
    request: Request,
    context: ContextDependency,
    project_id: str = ProjectIdDependency,
) -> Response:
    """Post ``text`` into the caller's Twitch channel as the bot."""
    uid = context.identity_gate.subject_from_headers(request.headers)
    text = _require_query_string(request, "text")

    login = await context.user_logins.get_login(uid)
    await context.chat.send(login, text)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get("/set-login-to-user")
@router.get("/set-twitch-login-to-user")
async def set_login_to_user(request: Request, context: ContextDependency) -> Response:
    """Link the caller to the Twitch account that owns ``token``."""
    uid = context.identity_gate.subject_from_headers(request.headers)
    token = _require_query_string(request, "token")

    login = await context.helix.get_login(token)
    await context.user_logins.set_login(uid, login)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get("/authenticate-with-token")
async def authenticate_with_token(request: Request, context: ContextDependency) -> Response:
    """Exchange a pre-provisioned per-user token for a custom sign-in token."""
    token = _require_query_string(request, "token")
    uid = _require_query_string(request, "uid")

    try:
        await context.token_verifier.verify(uid, token)
    except AuthError:
        logger.warning("Token mismatch for %s", uid)
        return JSONResponse(content={}, status_code=HTTPStatus.UNAUTHORIZED)

    custom_token = await context.custom_tokens.create_custom_token(uid)
    return PlainTextResponse(custom_token)


__all__ = ["router"]
