"""
Unit tests for RedisRefreshTokenStore using fakeredis.

The flows covered:
- create + get
- duplicate token ids are rejected
- revoke (idempotent, never resurrects a missing hash)
- delete_for_user and the per-user index (TTL and pruning)
- a failed write leaves no TTL-less record
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
import redis

from wishlist.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from wishlist.services._shared.errors import ConflictError


def _now() -> datetime:
    return datetime.now(UTC)


def _tid(i: int) -> str:
    return f"{i:064x}"


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisRefreshTokenStore(r=fake_redis)


def test_create_and_get(store):
    expires = (_now() + timedelta(days=30)).replace(microsecond=0)
    store.create(token_id=_tid(1), user_id="user-1", expires_at=expires)

    view = store.get(_tid(1))
    assert view is not None
    assert view.user_id == "user-1"
    assert view.revoked is False
    assert view.expires_at == expires
    assert view.is_usable(_now())


def test_hash_expires_with_the_token(store):
    store.create(token_id=_tid(2), user_id="u", expires_at=_now() + timedelta(minutes=10))
    ttl = store.r.ttl(store._k(_tid(2)))
    assert 0 < ttl <= 600
    assert store.r.sismember(store._ku("u"), _tid(2))


def test_duplicate_token_id_fails_loudly(store):
    expires = _now() + timedelta(days=1)
    store.create(token_id=_tid(3), user_id="first", expires_at=expires)

    with pytest.raises(ConflictError):
        store.create(token_id=_tid(3), user_id="second", expires_at=expires)

    view = store.get(_tid(3))
    assert view is not None and view.user_id == "first"


def test_get_unknown_returns_none(store):
    assert store.get("missing") is None


def test_revoke_is_idempotent(store):
    store.create(token_id=_tid(4), user_id="u", expires_at=_now() + timedelta(days=1))

    assert store.revoke(_tid(4)) is True
    assert store.revoke(_tid(4)) is True
    view = store.get(_tid(4))
    assert view is not None and view.revoked is True
    assert not view.is_usable(_now())


def test_revoke_unknown_does_not_create_a_hash(store):
    assert store.revoke("missing") is False
    assert store.r.exists(store._k("missing")) == 0


def test_delete_for_user(store):
    expires = _now() + timedelta(days=1)
    for i in (10, 11, 12):
        store.create(token_id=_tid(i), user_id="bulk", expires_at=expires)
    store.create(token_id=_tid(13), user_id="other", expires_at=expires)
    # A hash that already expired still sits in the index.
    store.r.delete(store._k(_tid(12)))

    assert store.delete_for_user("bulk") == 2
    assert store.get(_tid(10)) is None
    assert store.r.exists(store._ku("bulk")) == 0
    assert store.get(_tid(13)) is not None
    assert store.delete_for_user("bulk") == 0


def test_user_index_expires_with_newest_token(store):
    store.create(token_id=_tid(20), user_id="u", expires_at=_now() + timedelta(days=30))
    store.create(token_id=_tid(21), user_id="u", expires_at=_now() + timedelta(minutes=5))

    # A shorter-lived token never shortens the index.
    assert store.r.ttl(store._ku("u")) > 29 * 24 * 3600


def test_expired_members_are_pruned_from_user_index(store):
    expires = _now() + timedelta(days=1)
    for i in range(30, 35):
        store.create(token_id=_tid(i), user_id="u1", expires_at=expires)
    for i in range(30, 35):
        store.r.delete(store._k(_tid(i)))

    store.create(token_id=_tid(35), user_id="u1", expires_at=expires)

    members = {m.decode() for m in store.r.smembers(store._ku("u1"))}
    assert members == {_tid(35)}
    assert store.r.ttl(store._ku("u1")) > 0


def test_failed_write_leaves_no_record_behind(store, monkeypatch):
    def boom(self, *args, **kwargs):
        raise redis.ConnectionError("connection dropped")

    monkeypatch.setattr(redis.client.Pipeline, "execute", boom)

    with pytest.raises(redis.ConnectionError):
        store.create(token_id=_tid(40), user_id="u", expires_at=_now() + timedelta(days=1))

    monkeypatch.undo()
    assert store.r.exists(store._k(_tid(40))) == 0
    # The id stays free for a retry, and the retry gets a TTL.
    store.create(token_id=_tid(40), user_id="u", expires_at=_now() + timedelta(days=1))
    assert store.r.ttl(store._k(_tid(40))) > 0
