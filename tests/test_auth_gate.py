try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
import json

import pytest

from chattranslator.clients.sqlite_store import SQLiteStore
from chattranslator.core.config import StoreSettings
from chattranslator.core.errors import (
    AuthError,
    ConfigurationError,
    MalformedAssertionError,
)
from chattranslator.services.auth_gate import IdentityAssertionGate, SharedTokenVerifier

HEADER = "X-Upstream-Identity-Assertion"


def _assertion(claims: dict, *, urlsafe: bool = False) -> str:
    raw = json.dumps(claims).encode("utf-8")
    if urlsafe:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    return base64.b64encode(raw).decode("ascii")


def test_subject_is_read_from_standard_base64() -> None:
    gate = IdentityAssertionGate(HEADER)

    uid = gate.subject_from_headers({HEADER: _assertion({"sub": "user-1", "iss": "x"})})

    assert uid == "user-1"


def test_subject_is_read_from_unpadded_urlsafe_base64() -> None:
    gate = IdentityAssertionGate(HEADER)
    header = _assertion({"sub": "user-?>>", "email": "a@b.c"}, urlsafe=True)

    assert gate.subject_from_headers({HEADER: header}) == "user-?>>"


def test_subject_claim_alias_is_accepted() -> None:
    assert IdentityAssertionGate.decode_subject(_assertion({"subject": "user-2"})) == "user-2"


def test_missing_header_is_unauthenticated() -> None:
    gate = IdentityAssertionGate(HEADER)

    with pytest.raises(AuthError):
        gate.subject_from_headers({})


@pytest.mark.parametrize(
    "raw",
    [
        "%%%not-base64%%%",
        base64.b64encode(b"not json").decode("ascii"),
        _assertion({"email": "a@b.c"}),
        _assertion({"sub": 42}),
        base64.b64encode(b'["sub"]').decode("ascii"),
    ],
)
def test_malformed_assertions_are_fatal(raw: str) -> None:
    with pytest.raises(MalformedAssertionError):
        IdentityAssertionGate.decode_subject(raw)


@pytest.fixture()
def verifier(tmp_path):
    store = SQLiteStore(str(tmp_path / "users.db"))
    store.set("users", "uid-1", {"token": "expected-token"})
    store.set("users", "uid-2", {"name": "no token"})
    return SharedTokenVerifier(store, StoreSettings())


@pytest.mark.asyncio
async def test_matching_token_passes(verifier) -> None:
    await verifier.verify("uid-1", "expected-token")


@pytest.mark.asyncio
async def test_token_comparison_is_exact(verifier) -> None:
    for candidate in ("expected-token ", "Expected-token", "expected", ""):
        with pytest.raises(AuthError):
            await verifier.verify("uid-1", candidate)


@pytest.mark.asyncio
async def test_missing_user_record_is_a_configuration_error(verifier) -> None:
    with pytest.raises(ConfigurationError):
        await verifier.verify("unknown", "expected-token")


@pytest.mark.asyncio
async def test_missing_expected_token_is_a_configuration_error(verifier) -> None:
    with pytest.raises(ConfigurationError):
        await verifier.verify("uid-2", "anything")
