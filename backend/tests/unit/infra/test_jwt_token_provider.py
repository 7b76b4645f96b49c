"""Unit tests for the PyJWT-backed session-token codec."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from wishlist.core.config import ConfigurationError
from wishlist.infra.jwt.pyjwt_token_provider import JWTTokenProvider
from wishlist.services.auth.dto import UserOut

SECRET = "unit-test-secret-with-at-least-32-characters"


@pytest.fixture()
def provider() -> JWTTokenProvider:
    return JWTTokenProvider(SECRET)


@pytest.fixture()
def user() -> UserOut:
    return UserOut(
        id="3f2c0c7e5d8b4a4f9e1d2c3b4a5f6e7d",
        name="Ada",
        email="ada@example.com",
        provider="google",
        avatar=None,
        created_at=None,
    )


class TestConstruction:
    @pytest.mark.parametrize("secret", [None, "", "x" * 31])
    def test_rejects_missing_or_short_secret(self, secret):
        with pytest.raises(ConfigurationError):
            JWTTokenProvider(secret)

    def test_accepts_32_characters(self):
        assert JWTTokenProvider("x" * 32).access_expires == timedelta(minutes=15)

    def test_lifetimes_are_configurable(self):
        p = JWTTokenProvider(SECRET, access_expires="5m", refresh_expires=3600)
        assert p.access_expires == timedelta(minutes=5)
        assert p.refresh_expires == timedelta(hours=1)


class TestRoundTrip:
    def test_access_token(self, provider):
        token = provider.generate_access_token("u1", "a@b.com", "google")
        claims = provider.verify_access_token(token)

        assert claims is not None
        assert (claims.user_id, claims.email, claims.provider) == ("u1", "a@b.com", "google")
        assert claims.expires_at - claims.issued_at == timedelta(minutes=15)

    def test_refresh_token(self, provider):
        token = provider.generate_refresh_token("u1", "tid-1")
        claims = provider.verify_refresh_token(token)

        assert claims is not None
        assert (claims.user_id, claims.token_id) == ("u1", "tid-1")
        assert claims.expires_at - claims.issued_at == timedelta(days=30)

    def test_payload_carries_only_documented_claims(self, provider):
        access = jwt.decode(
            provider.generate_access_token("u1", "a@b.com", "github"), SECRET, algorithms=["HS256"]
        )
        refresh = jwt.decode(
            provider.generate_refresh_token("u1", "tid"), SECRET, algorithms=["HS256"]
        )
        assert set(access) == {"userId", "email", "provider", "iat", "exp"}
        assert set(refresh) == {"userId", "tokenId", "iat", "exp"}


class TestRejections:
    def test_wrong_secret(self, provider):
        other = JWTTokenProvider("another-secret-that-is-32-chars-long!!")
        token = other.generate_access_token("u1", "a@b.com", "google")
        assert provider.verify_access_token(token) is None
        assert provider.verify_refresh_token(other.generate_refresh_token("u1", "t")) is None

    def test_expired_access_token(self, provider):
        with freeze_time("2026-01-01 12:00:00"):
            token = provider.generate_access_token("u1", "a@b.com", "google")
        with freeze_time("2026-01-01 12:16:00"):
            assert provider.verify_access_token(token) is None

    def test_expired_refresh_token(self, provider):
        issued = datetime(2026, 1, 1, tzinfo=UTC)
        token = provider.generate_refresh_token("u1", "tid", now=issued)
        with freeze_time(issued + timedelta(days=30, seconds=1)):
            assert provider.verify_refresh_token(token) is None

    @pytest.mark.parametrize("token", [None, "", 42, b"bytes", "not-a-jwt", "a.b.c"])
    def test_malformed_input_yields_none(self, provider, token):
        assert provider.verify_access_token(token) is None
        assert provider.verify_refresh_token(token) is None

    def test_other_algorithms_are_rejected(self, provider):
        token = jwt.encode({"userId": "u1"}, SECRET, algorithm="HS512")
        assert provider.verify_access_token(token) is None

    def test_requires_string_user_id(self, provider):
        token = jwt.encode(
            {"userId": 7, "exp": datetime.now(UTC) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )
        assert provider.verify_access_token(token) is None


def test_refresh_token_verifies_as_access_without_email(provider):
    token = provider.generate_refresh_token("u1", "tid")
    claims = provider.verify_access_token(token)

    assert claims is not None
    assert claims.user_id == "u1"
    assert claims.email is None and claims.provider is None

    reverse = provider.verify_refresh_token(provider.generate_access_token("u1", "a@b.com", "google"))
    assert reverse is not None and reverse.token_id is None


def test_token_pair(provider, user):
    with freeze_time("2026-03-01 08:00:00"):
        pair = provider.generate_token_pair(user)

    assert len(pair.token_id) == 64
    assert pair.expires_at == datetime(2026, 3, 31, 8, 0, tzinfo=UTC)
    with freeze_time("2026-03-01 08:00:01"):
        refresh = provider.verify_refresh_token(pair.refresh_token)
        access = provider.verify_access_token(pair.access_token)
    assert refresh is not None and refresh.token_id == pair.token_id
    assert refresh.expires_at == pair.expires_at
    assert access is not None and access.email == user.email


def test_token_ids_are_distinct(provider, user):
    ids = {provider.generate_token_pair(user).token_id for _ in range(50)}
    assert len(ids) == 50
