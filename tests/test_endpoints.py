try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from chattranslator.clients.sqlite_store import SQLiteStore
from chattranslator.core.config import AppSettings, GoogleCloudSettings, StoreSettings, TwitchSettings
from chattranslator.core.errors import UpstreamError
from chattranslator.dependencies import AppContext
from chattranslator.main import create_app
from chattranslator.models.token import AccessTokenRecord
from chattranslator.schemas import TranslateTextResult
from chattranslator.services import (
    IdentityAssertionGate,
    SharedTokenVerifier,
    TwitchTokenService,
    UserLoginService,
)

pytestmark = pytest.mark.anyio

HEADER = "X-Upstream-Identity-Assertion"


class FakeTranslationClient:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def default_glossary_config(self):
        return None

    async def translate(self, text: str, *, target_language_code=None, glossary_config=None):
        self.calls.append(text)
        return TranslateTextResult(
            detected_language_code="ja", translated_text=f"[en] {text}"
        )


class FakeOAuthClient:
    def __init__(self) -> None:
        self.grants = 0

    async def client_credentials(self, scope=None) -> AccessTokenRecord:
        self.grants += 1
        return AccessTokenRecord(
            access_token="bot-token",
            expires_in=3600,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

    async def refresh(self, refresh_token, scope=None) -> AccessTokenRecord:  # pragma: no cover
        raise AssertionError("refresh not expected")


class RecordingChatSession:
    def __init__(self, token_provider) -> None:
        self._token_provider = token_provider
        self.sent: list[tuple[str, str, str]] = []
        self.closed = False

    async def send(self, login: str, text: str) -> None:
        token = await self._token_provider()
        self.sent.append((login, text, token.access_token))

    async def aclose(self) -> None:
        self.closed = True


class FakeHelixClient:
    def __init__(self) -> None:
        self.tokens: list[str] = []
        self.fail = False

    async def get_login(self, user_token: str) -> str:
        if self.fail:
            raise UpstreamError("Twitch login could not be retrieved!")
        self.tokens.append(user_token)
        return "streamer"


class FakeCustomTokenIssuer:
    async def create_custom_token(self, uid: str) -> str:
        return f"custom-token-for-{uid}"


def _build_context(tmp_path, *, project_id: str | None = "test-project"):
    settings = AppSettings(
        google=GoogleCloudSettings(project_id=project_id),
        store=StoreSettings(backend="sqlite"),
        twitch=TwitchSettings(refresh_window_seconds=0),
    )
    store = SQLiteStore(str(tmp_path / "store.db"))
    store.set("users", "uid-1", {"token": "expected-token"})
    oauth = FakeOAuthClient()
    token_service = TwitchTokenService(
        store=store,
        oauth_client=oauth,
        twitch_settings=settings.twitch,
        store_settings=settings.store,
    )
    context = AppContext(
        settings=settings,
        store=store,
        token_service=token_service,
        translation=FakeTranslationClient(),
        helix=FakeHelixClient(),
        chat=RecordingChatSession(token_service.get_token),
        custom_tokens=FakeCustomTokenIssuer(),
        identity_gate=IdentityAssertionGate(settings.identity_assertion_header),
        token_verifier=SharedTokenVerifier(store, settings.store),
        user_logins=UserLoginService(store, settings.store),
    )
    return context, oauth


def _assertion(uid: str) -> str:
    return base64.b64encode(json.dumps({"sub": uid}).encode("utf-8")).decode("ascii")


@pytest.fixture()
def context_parts(tmp_path):
    return _build_context(tmp_path)


@pytest.fixture()
async def client(context_parts):
    context, _ = context_parts
    app = create_app(context=context)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


async def test_healthcheck(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_localhost_origin_gets_wildcard(client):
    response = await client.get(
        "/translate-text",
        params={"text": "hola"},
        headers={"Origin": "http://localhost:3000"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


async def test_other_origins_get_production_origin(client):
    for origin in ("https://chattalker.web.app", "https://evil.example.com"):
        response = await client.get(
            "/translate-text", params={"text": "hola"}, headers={"Origin": origin}
        )
        assert response.headers["access-control-allow-origin"] == "https://chattalker.web.app"


async def test_missing_origin_sets_no_cors_header(client):
    response = await client.get("/translate-text", params={"text": "hola"})

    assert "access-control-allow-origin" not in response.headers


async def test_preflight_short_circuits(client, context_parts):
    context, _ = context_parts

    response = await client.options(
        "/send-text-from-bot-to-chat",
        headers={"Origin": "http://localhost:5173"},
    )

    assert response.status_code == 204
    assert "GET" in response.headers["access-control-allow-methods"]
    assert "Authorization" in response.headers["access-control-allow-headers"]
    assert response.headers["access-control-max-age"] == "3600"
    assert response.headers["access-control-allow-origin"] == "*"
    assert context.chat.sent == []


async def test_translate_text_returns_camel_case_result(client):
    response = await client.get("/translate-text", params={"text": "こんにちは"})

    assert response.status_code == 200
    assert response.json() == {
        "detectedLanguageCode": "ja",
        "translatedText": "[en] こんにちは",
    }


async def test_translate_text_is_stable_for_identical_input(client):
    first = await client.get("/translate-text", params={"text": "bonjour"})
    second = await client.get("/translate-text", params={"text": "bonjour"})

    assert first.json()["detectedLanguageCode"] == second.json()["detectedLanguageCode"]


async def test_translate_text_requires_text(client):
    response = await client.get("/translate-text")

    assert response.status_code == 400
    assert response.text == "Invalid text"


async def test_translate_text_rejects_repeated_text(client):
    response = await client.get("/translate-text?text=a&text=b")

    assert response.status_code == 400
    assert response.text == "Invalid text"


async def test_keep_alive_probe_skips_translation(client, context_parts):
    context, _ = context_parts

    response = await client.get("/translate-text", params={"keepAlive": "true"})

    assert response.status_code == 204
    assert context.translation.calls == []


async def test_missing_project_id_is_a_server_error(tmp_path):
    context, _ = _build_context(tmp_path, project_id=None)
    app = create_app(context=context)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://testserver",
    ) as test_client:
        response = await test_client.get("/translate-text", params={"text": "hola"})

    assert response.status_code == 500
    assert "PROJECT_ID" not in response.text


async def test_send_text_requires_identity_assertion(client, context_parts):
    context, oauth = context_parts

    response = await client.get("/send-text-from-bot-to-chat", params={"text": "hi"})

    assert response.status_code == 401
    assert context.chat.sent == []
    assert oauth.grants == 0


async def test_send_text_requires_text(client, context_parts):
    context, _ = context_parts

    response = await client.get(
        "/send-text-from-bot-to-chat", headers={HEADER: _assertion("uid-1")}
    )

    assert response.status_code == 400
    assert response.text == "Invalid text"
    assert context.chat.sent == []


async def test_send_text_delivers_as_bot(client, context_parts):
    context, oauth = context_parts
    context.store.set("userTwitchLogin", "uid-1", {"login": "streamer"})

    response = await client.get(
        "/send-text-from-bot-to-chat",
        params={"text": "hello chat"},
        headers={HEADER: _assertion("uid-1")},
    )

    assert response.status_code == 204
    assert context.chat.sent == [("streamer", "hello chat", "bot-token")]
    assert oauth.grants == 1
    stored = context.store.get("twitchAccessToken", "server")
    assert json.loads(stored.data["accessTokenJson"])["access_token"] == "bot-token"


async def test_send_text_without_linked_login_fails(client, context_parts):
    context, _ = context_parts

    response = await client.get(
        "/send-text-from-bot-to-chat",
        params={"text": "hello"},
        headers={HEADER: _assertion("uid-unlinked")},
    )

    assert response.status_code == 500
    assert context.chat.sent == []


async def test_malformed_assertion_is_a_server_error(client):
    response = await client.get(
        "/send-text-from-bot-to-chat",
        params={"text": "hello"},
        headers={HEADER: base64.b64encode(b'{"email": "x"}').decode("ascii")},
    )

    assert response.status_code == 500


async def test_set_login_links_user(client, context_parts):
    context, _ = context_parts

    response = await client.get(
        "/set-login-to-user",
        params={"token": "user-access-token"},
        headers={HEADER: _assertion("uid-9")},
    )

    assert response.status_code == 204
    assert context.helix.tokens == ["user-access-token"]
    assert context.store.get("userTwitchLogin", "uid-9").data == {"login": "streamer"}


async def test_set_login_legacy_path_is_served(client):
    response = await client.get(
        "/set-twitch-login-to-user",
        params={"token": "user-access-token"},
        headers={HEADER: _assertion("uid-9")},
    )

    assert response.status_code == 204


async def test_set_login_requires_assertion_and_token(client, context_parts):
    context, _ = context_parts

    unauthenticated = await client.get("/set-login-to-user", params={"token": "t"})
    missing_token = await client.get(
        "/set-login-to-user", headers={HEADER: _assertion("uid-9")}
    )

    assert unauthenticated.status_code == 401
    assert missing_token.status_code == 400
    assert missing_token.text == "Invalid token"
    assert context.helix.tokens == []


async def test_set_login_upstream_failure_does_not_link(client, context_parts):
    context, _ = context_parts
    context.helix.fail = True

    response = await client.get(
        "/set-login-to-user",
        params={"token": "bad"},
        headers={HEADER: _assertion("uid-9")},
    )

    assert response.status_code == 500
    assert context.store.get("userTwitchLogin", "uid-9") is None


async def test_authenticate_with_token_issues_custom_token(client):
    response = await client.get(
        "/authenticate-with-token", params={"token": "expected-token", "uid": "uid-1"}
    )

    assert response.status_code == 200
    assert response.text == "custom-token-for-uid-1"


async def test_authenticate_with_token_mismatch_returns_empty_object(client):
    response = await client.get(
        "/authenticate-with-token", params={"token": "wrong", "uid": "uid-1"}
    )

    assert response.status_code == 401
    assert response.json() == {}


async def test_authenticate_with_token_validates_fields(client):
    missing_token = await client.get("/authenticate-with-token", params={"uid": "uid-1"})
    missing_uid = await client.get("/authenticate-with-token", params={"token": "t"})

    assert (missing_token.status_code, missing_token.text) == (400, "Invalid token")
    assert (missing_uid.status_code, missing_uid.text) == (400, "Invalid uid")


async def test_authenticate_with_unknown_uid_is_a_server_error(client):
    response = await client.get(
        "/authenticate-with-token", params={"token": "t", "uid": "nobody"}
    )

    assert response.status_code == 500


async def test_rejected_query_does_not_log_token_values(client, caplog):
    with caplog.at_level("INFO", logger="chattranslator"):
        response = await client.get(
            "/authenticate-with-token", params={"token": "expected-token"}
        )

    app_messages = [
        record.getMessage()
        for record in caplog.records
        if record.name.startswith("chattranslator")
    ]
    assert response.status_code == 400
    assert any("uid" in message for message in app_messages)
    assert not any("expected-token" in message for message in app_messages)
