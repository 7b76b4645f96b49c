from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from wishlist.services._shared.errors import ConflictError
from wishlist.services._shared.ports import RefreshTokenStore, RefreshTokenView


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh-token store.

    Layout: one hash per token (``rt:{token_id}``) expiring with the token,
    plus a per-user index set (``rt:u:{user_id}``) used by
    :meth:`delete_for_user`. The index expires with its newest token and is
    pruned of expired members on every insert.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_id: str) -> str:
        return f"rt:{token_id}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    @staticmethod
    def _b(value: bytes | None, default: str = "") -> str:
        return value.decode() if value is not None else default

    # -------------------- API ------------------------

    def create(self, *, token_id: str, user_id: str, expires_at: datetime) -> None:
        """
        Insert the record *before* the refresh token reaches the client.

        The existence check and every write run under ``WATCH``/``MULTI``, so
        an existing record is never overwritten and a hash never exists
        without its TTL. The user index lives at least as long as its newest
        token.
        """
        key, key_u = self._k(token_id), self._ku(user_id)
        ttl = max(1, self._to_ts(expires_at) - self._to_ts(datetime.now(UTC)))
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key, key_u)
                    if p.exists(key):
                        p.unwatch()
                        raise ConflictError("RefreshToken", "token id already exists")
                    index_ttl = max(ttl, int(p.ttl(key_u)))
                    p.multi()
                    p.hset(
                        key,
                        mapping={
                            "user_id": user_id,
                            "expires_at": str(self._to_ts(expires_at)),
                            "revoked": "0",
                        },
                    )
                    p.expire(key, ttl)
                    p.sadd(key_u, token_id)
                    p.expire(key_u, index_ttl)
                    p.execute()
                break
            except redis.WatchError:
                continue
        self._prune_index(user_id)

    def _prune_index(self, user_id: str) -> int:
        """Drop index members whose hash has already expired."""
        key_u = self._ku(user_id)
        members = [
            m.decode() if isinstance(m, bytes | bytearray) else str(m)
            for m in self.r.smembers(key_u)
        ]
        if not members:
            return 0
        pipe = self.r.pipeline(transaction=False)
        for token_id in members:
            pipe.exists(self._k(token_id))
        stale = [t for t, alive in zip(members, pipe.execute(), strict=True) if not alive]
        if stale:
            self.r.srem(key_u, *stale)
        return len(stale)

    def get(self, token_id: str) -> RefreshTokenView | None:
        h = self.r.hgetall(self._k(token_id))
        if not h or b"expires_at" not in h:
            return None
        return RefreshTokenView(
            token_id=token_id,
            user_id=self._b(h.get(b"user_id")),
            expires_at=datetime.fromtimestamp(int(self._b(h.get(b"expires_at"), "0")), tz=UTC),
            revoked=self._b(h.get(b"revoked"), "0") == "1",
        )

    def revoke(self, token_id: str) -> bool:
        key = self._k(token_id)
        # WATCH so a hash expiring mid-call is not resurrected without a TTL.
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    if not p.exists(key):
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "revoked", "1")
                    p.execute()
                return True
            except redis.WatchError:
                continue

    def delete_for_user(self, user_id: str) -> int:
        key_u = self._ku(user_id)
        token_ids = [
            member.decode() if isinstance(member, bytes | bytearray) else str(member)
            for member in self.r.smembers(key_u)
        ]
        if not token_ids:
            return 0
        pipe = self.r.pipeline(transaction=True)
        for token_id in token_ids:
            pipe.delete(self._k(token_id))
        pipe.delete(key_u)
        removed = pipe.execute()
        # Index members whose hash already expired do not count.
        return sum(int(n) for n in removed[:-1])
