from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory
from wishlist.infra.sql.sql_refresh_token_store import SQLRefreshTokenStore
from wishlist.models import RefreshToken
from wishlist.services._shared.errors import ConflictError


@pytest.fixture()
def store() -> SQLRefreshTokenStore:
    return SQLRefreshTokenStore()


@pytest.fixture()
def user(session):
    u = UserFactory()
    session.commit()
    return u


class TestSQLRefreshTokenStore:
    def test_create_and_get(self, store, user):
        expires = datetime.now(UTC).replace(microsecond=0) + timedelta(days=30)
        store.create(token_id="a" * 64, user_id=user.id, expires_at=expires)

        view = store.get("a" * 64)
        assert view is not None
        assert view.user_id == user.id
        assert view.revoked is False
        assert view.expires_at == expires
        assert view.expires_at.tzinfo is not None

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None

    def test_duplicate_token_id_raises_conflict(self, store, user):
        expires = datetime.now(UTC) + timedelta(days=1)
        store.create(token_id="dup", user_id=user.id, expires_at=expires)

        with pytest.raises(ConflictError):
            store.create(token_id="dup", user_id=user.id, expires_at=expires)

        view = store.get("dup")
        assert view is not None and view.revoked is False

    def test_revoke_is_idempotent(self, store, user):
        store.create(token_id="r1", user_id=user.id, expires_at=datetime.now(UTC) + timedelta(days=1))

        assert store.revoke("r1") is True
        assert store.revoke("r1") is True
        assert store.get("r1").revoked is True
        assert store.revoke("unknown") is False

    def test_delete_for_user(self, store, user, session):
        other = UserFactory()
        RefreshTokenFactory.create_batch(2, user=user)
        RefreshTokenFactory(user=other)
        session.commit()

        assert store.delete_for_user(user.id) == 2
        assert session.query(RefreshToken).filter_by(user_id=user.id).count() == 0
        assert session.query(RefreshToken).filter_by(user_id=other.id).count() == 1

    def test_prune_expired(self, store, user, session):
        now = datetime.now(UTC)
        RefreshTokenFactory(user=user, expires_at=now - timedelta(days=1))
        RefreshTokenFactory(user=user, expires_at=now - timedelta(minutes=1), revoked=True)
        keep = RefreshTokenFactory(user=user, expires_at=now + timedelta(days=1))
        session.commit()

        assert store.prune_expired(before=now, dry_run=True) == 2
        assert session.query(RefreshToken).count() == 3

        assert store.prune_expired(before=now) == 2
        assert [r.token_id for r in session.query(RefreshToken).all()] == [keep.token_id]
