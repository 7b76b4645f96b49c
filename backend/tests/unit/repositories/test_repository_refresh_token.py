from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory
from wishlist.repositories.refresh_token import RefreshTokenRepository


@pytest.fixture()
def repo():
    return RefreshTokenRepository()


def test_get_by_token_id(repo, session):
    record = RefreshTokenFactory()
    session.commit()

    assert repo.get_by_token_id(record.token_id).id == record.id
    assert repo.get_by_token_id("missing") is None


def test_mark_revoked(repo, session):
    record = RefreshTokenFactory()
    session.commit()

    assert repo.mark_revoked(record.token_id) is True
    assert repo.mark_revoked(record.token_id) is True
    assert repo.mark_revoked("missing") is False
    session.commit()
    assert repo.get_by_token_id(record.token_id).revoked is True


def test_delete_for_user_leaves_other_users(repo, session):
    owner, other = UserFactory(), UserFactory()
    RefreshTokenFactory.create_batch(3, user=owner)
    kept = RefreshTokenFactory(user=other)
    session.commit()

    assert repo.delete_for_user(owner.id) == 3
    assert repo.get_by_token_id(kept.token_id) is not None


def test_expired_helpers(repo, session):
    now = datetime.now(UTC)
    user = UserFactory()
    RefreshTokenFactory(user=user, expires_at=now - timedelta(seconds=1))
    RefreshTokenFactory(user=user, expires_at=now + timedelta(hours=1))
    session.commit()

    assert repo.count_expired(before=now) == 1
    assert repo.delete_expired(before=now) == 1
    assert repo.count_expired(before=now) == 0
