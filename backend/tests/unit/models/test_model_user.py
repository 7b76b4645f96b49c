"""Tests for the User and RefreshToken models."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory
from wishlist.models import RefreshToken, User


def _user(**overrides) -> User:
    data = {
        "name": "Alice",
        "email": "alice@example.com",
        "provider": "google",
        "provider_id": "sub-1",
    }
    data.update(overrides)
    return User(**data)


class TestUser:
    def test_id_is_opaque_hex(self, session):
        u = _user()
        session.add(u)
        session.commit()
        assert isinstance(u.id, str) and len(u.id) == 32
        int(u.id, 16)

    def test_email_normalized_and_unique(self, session):
        u1 = _user(email="  Alice@Example.COM ")
        session.add(u1)
        session.commit()
        assert u1.email == "alice@example.com"

        session.add(_user(email="alice@example.com", provider="github", provider_id="gh-1"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_provider_and_provider_id_unique(self, session):
        session.add(_user(email="one@example.com"))
        session.commit()

        session.add(_user(email="two@example.com"))
        with pytest.raises(IntegrityError):
            session.commit()

    def test_same_provider_id_on_different_providers_is_allowed(self, session):
        session.add(_user(email="one@example.com", provider="google", provider_id="42"))
        session.add(_user(email="two@example.com", provider="github", provider_id="42"))
        session.commit()
        assert session.query(User).filter_by(provider_id="42").count() == 2

    @pytest.mark.parametrize("email", ["", "not-an-email"])
    def test_rejects_invalid_email(self, email):
        with pytest.raises(ValueError):
            _user(email=email)

    def test_rejects_unknown_provider(self):
        with pytest.raises(ValueError):
            _user(provider="myspace")

    def test_timestamps_filled_by_database(self, session):
        u = UserFactory()
        session.commit()
        assert u.created_at is not None
        assert u.updated_at is not None
        assert u.last_login_at is None


class TestRefreshToken:
    def test_defaults_to_not_revoked(self, session):
        record = RefreshTokenFactory()
        session.commit()
        assert record.revoked is False
        assert record.user.refresh_tokens == [record]

    def test_token_id_unique(self, session):
        first = RefreshTokenFactory()
        session.commit()

        session.add(
            RefreshToken(token_id=first.token_id, user_id=first.user_id, expires_at=first.expires_at)
        )
        with pytest.raises(IntegrityError):
            session.commit()
