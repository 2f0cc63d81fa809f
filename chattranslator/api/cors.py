"""
Cross-origin policy shared by every route.

Local development origins get a wildcard; every other origin is answered
with the single production origin. Preflight requests never reach a route.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

from fastapi import Request, Response

from chattranslator.core.config import CorsSettings


def resolve_allowed_origin(origin: Optional[str], settings: CorsSettings) -> Optional[str]:
    """Return the ``Access-Control-Allow-Origin`` value for ``origin``."""
    if origin is None:
        return None
    if urlparse(origin).hostname == "localhost":
        return "*"
    return settings.production_origin


def handle_cors(request: Request, response: Response, settings: CorsSettings) -> bool:
    """
    Decorate ``response`` with CORS headers.

    Returns ``False`` when the request was a preflight and ``response`` is
    already the complete answer, ``True`` when processing should continue.
    """
    allowed_origin = resolve_allowed_origin(request.headers.get("origin"), settings)
    if allowed_origin is not None:
        response.headers["Access-Control-Allow-Origin"] = allowed_origin

    if request.method == "OPTIONS":
        response.headers["Access-Control-Allow-Methods"] = settings.allow_methods
        response.headers["Access-Control-Allow-Headers"] = settings.allow_headers
        response.headers["Access-Control-Max-Age"] = str(settings.max_age_seconds)
        response.status_code = 204
        return False

    return True


async def cors_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    settings: CorsSettings = request.app.state.settings.cors
    preflight = Response(status_code=204)
    if not handle_cors(request, preflight, settings):
        return preflight

    response = await call_next(request)
    allowed_origin = preflight.headers.get("Access-Control-Allow-Origin")
    if allowed_origin is not None:
        response.headers["Access-Control-Allow-Origin"] = allowed_origin
    return response


__all__ = ["cors_middleware", "handle_cors", "resolve_allowed_origin"]
