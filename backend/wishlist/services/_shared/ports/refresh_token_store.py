from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from wishlist.services._shared.errors import ConflictError


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Read-model for a refresh-token record.

    :ivar token_id: Identifier carried by the refresh token.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC, timezone-aware).
    :ivar revoked: Whether the record has been revoked (never reset).
    """

    token_id: str
    user_id: str
    expires_at: datetime
    revoked: bool

    def is_usable(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now


class RefreshTokenStore(Protocol):
    """
    Server-side state of issued refresh tokens.

    Implementations never overwrite an existing record: ``create`` with a
    known ``token_id`` raises :class:`ConflictError`.
    """

    def create(self, *, token_id: str, user_id: str, expires_at: datetime) -> None:
        """Persist a new, non-revoked record. Must run before the token is handed out."""

    def get(self, token_id: str) -> RefreshTokenView | None:
        """Fetch a record snapshot (if present)."""

    def revoke(self, token_id: str) -> bool:
        """Mark a record revoked. Idempotent. :returns: True if it existed."""

    def delete_for_user(self, user_id: str) -> int:
        """Remove every record of ``user_id``. :returns: Number removed."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh-token store.

    .. note::
       Uses a threading lock so concurrent tests observe atomic writes.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenView] = {}
        self._lock = threading.Lock()

    def create(self, *, token_id: str, user_id: str, expires_at: datetime) -> None:
        with self._lock:
            if token_id in self._by_token:
                raise ConflictError("RefreshToken", "token id already exists")
            self._by_token[token_id] = RefreshTokenView(
                token_id=token_id,
                user_id=user_id,
                expires_at=expires_at,
                revoked=False,
            )

    def get(self, token_id: str) -> RefreshTokenView | None:
        return self._by_token.get(token_id)

    def revoke(self, token_id: str) -> bool:
        with self._lock:
            view = self._by_token.get(token_id)
            if view is None:
                return False
            self._by_token[token_id] = replace(view, revoked=True)
            return True

    def delete_for_user(self, user_id: str) -> int:
        with self._lock:
            doomed = [tid for tid, v in self._by_token.items() if v.user_id == user_id]
            for tid in doomed:
                del self._by_token[tid]
            return len(doomed)
