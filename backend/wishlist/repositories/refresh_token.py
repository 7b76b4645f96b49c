"""Refresh-token repository backing the relational revocation store."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, func, select, update

from wishlist.models.refresh_token import RefreshToken
from wishlist.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only access to :class:`RefreshToken` rows."""

    model = RefreshToken

    def _filterable_fields(self):
        return {
            "token_id": RefreshToken.token_id,
            "user_id": RefreshToken.user_id,
            "revoked": RefreshToken.revoked,
        }

    def get_by_token_id(self, token_id: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token_id == token_id)
        result = self.session.execute(stmt).scalars().first()
        return cast(RefreshToken | None, result)

    def mark_revoked(self, token_id: str) -> bool:
        """Set ``revoked`` on the record; ``False`` when no record matches.

        Revoking an already revoked record is a no-op that still returns
        ``True``.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token_id == token_id)
            .values(revoked=True)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def delete_for_user(self, user_id: str) -> int:
        """Hard-delete every record owned by ``user_id``; returns the count."""
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)

    def count_expired(self, *, before: datetime) -> int:
        stmt = select(func.count()).select_from(RefreshToken).where(RefreshToken.expires_at <= before)
        return int(self.session.execute(stmt).scalar_one())

    def delete_expired(self, *, before: datetime) -> int:
        """Hard-delete records whose ``expires_at`` is at or before ``before``."""
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= before)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)
