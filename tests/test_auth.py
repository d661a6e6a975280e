"""Tests for session tokens and token-backed identity."""

from __future__ import annotations

import time

import jwt as pyjwt
import pytest

from teamgate.auth.identity import TokenIdentity
from teamgate.auth.jwt import (
    DEFAULT_SECRET,
    TokenExpiredError,
    TokenInvalidError,
    create_token,
    verify_token,
)
from teamgate.storage.metadata_store import MetadataStore

SECRET = "unit-test-secret"


class TestJWT:
    """Test session token creation and validation."""

    def test_create_token_basic(self) -> None:
        token = create_token("actor-1", secret=SECRET)
        assert isinstance(token, str)
        assert len(token) > 0

    def test_verify_token_valid(self) -> None:
        token = create_token("actor-1", team_id="T1", exp_minutes=1, secret=SECRET)
        payload = verify_token(token, SECRET)

        assert payload["sub"] == "actor-1"
        assert payload["team"] == "T1"
        assert "exp" in payload

    def test_verify_token_without_team(self) -> None:
        payload = verify_token(create_token("actor-1", secret=SECRET), SECRET)
        assert "team" not in payload

    def test_verify_token_custom_expiry(self) -> None:
        token = create_token("actor-2", exp_minutes=120, secret=SECRET)
        payload = verify_token(token, SECRET)
        assert payload["exp"] > int(time.time()) + 3600

    def test_default_secret_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEAMGATE_JWT_SECRET", "from-env")
        token = create_token("actor-1")
        assert verify_token(token, "from-env")["sub"] == "actor-1"

    def test_default_secret_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TEAMGATE_JWT_SECRET", raising=False)
        token = create_token("actor-1")
        assert verify_token(token, DEFAULT_SECRET)["sub"] == "actor-1"

    def test_verify_token_expired(self) -> None:
        token = create_token("actor-1", exp_minutes=-1, secret=SECRET)
        with pytest.raises(TokenExpiredError):
            verify_token(token, SECRET)

    def test_verify_token_invalid_signature(self) -> None:
        token = create_token("actor-1", secret=SECRET)
        with pytest.raises(TokenInvalidError):
            verify_token(token, "wrong-secret")

    def test_verify_token_malformed(self) -> None:
        with pytest.raises(TokenInvalidError):
            verify_token("not.a.valid.jwt", SECRET)

    def test_verify_token_missing_subject(self) -> None:
        token = pyjwt.encode({"exp": int(time.time()) + 60}, SECRET, algorithm="HS256")
        with pytest.raises(TokenInvalidError):
            verify_token(token, SECRET)


class TestTokenIdentity:
    """Test resolving the current actor from a session token."""

    async def test_current_actor_from_token(self, store: MetadataStore) -> None:
        identity = TokenIdentity(store, create_token("actor-1", secret=SECRET), SECRET)
        assert await identity.get_current_actor() == "actor-1"

    async def test_no_token(self, store: MetadataStore) -> None:
        identity = TokenIdentity(store, None, SECRET)
        assert await identity.get_current_actor() is None

    async def test_expired_token_is_unauthenticated(self, store: MetadataStore) -> None:
        token = create_token("actor-1", exp_minutes=-1, secret=SECRET)
        identity = TokenIdentity(store, token, SECRET)
        assert await identity.get_current_actor() is None

    async def test_forged_token_is_unauthenticated(self, store: MetadataStore) -> None:
        token = create_token("actor-1", secret="attacker")
        identity = TokenIdentity(store, token, SECRET)
        assert await identity.get_current_actor() is None

    async def test_legacy_role_from_profile(self, store: MetadataStore) -> None:
        await store.create_profile("actor-1", legacy_role="lender")
        identity = TokenIdentity(store, None, SECRET)

        assert await identity.get_legacy_role("actor-1") == "lender"
        assert await identity.get_legacy_role("nobody") is None

    async def test_active_team_from_token(self, store: MetadataStore) -> None:
        token = create_token("actor-1", team_id="T7", secret=SECRET)
        identity = TokenIdentity(store, token, SECRET)
        assert await identity.get_active_team() == "T7"

    async def test_token_without_team(self, store: MetadataStore) -> None:
        identity = TokenIdentity(store, create_token("actor-1", secret=SECRET), SECRET)
        assert await identity.get_active_team() is None

    async def test_forged_token_has_no_active_team(self, store: MetadataStore) -> None:
        token = create_token("actor-1", team_id="T7", secret="attacker")
        identity = TokenIdentity(store, token, SECRET)
        assert await identity.get_active_team() is None
