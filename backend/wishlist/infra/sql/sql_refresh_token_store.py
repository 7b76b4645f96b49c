from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from wishlist.models.base import as_utc
from wishlist.models.refresh_token import RefreshToken
from wishlist.services._shared.errors import ConflictError, violates
from wishlist.services._shared.ports import RefreshTokenStore, RefreshTokenView
from wishlist.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SQLRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh-token store.

    Every call runs in its own Unit of Work, so a record is committed before
    the caller hands the token to a client.
    """

    def create(self, *, token_id: str, user_id: str, expires_at: datetime) -> None:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                uow.refresh_tokens.add(
                    RefreshToken(token_id=token_id, user_id=user_id, expires_at=expires_at, revoked=False)
                )
        except IntegrityError as exc:
            if violates(exc, "uq_refresh_tokens_token_id"):
                raise ConflictError("RefreshToken", "token id already exists") from exc
            raise

    def get(self, token_id: str) -> RefreshTokenView | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_token_id(token_id)
            if row is None:
                return None
            return RefreshTokenView(
                token_id=row.token_id,
                user_id=row.user_id,
                expires_at=as_utc(row.expires_at),
                revoked=bool(row.revoked),
            )

    def revoke(self, token_id: str) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.mark_revoked(token_id)

    def delete_for_user(self, user_id: str) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_for_user(user_id)

    def prune_expired(self, *, before: datetime, dry_run: bool = False) -> int:
        """Delete (or, with ``dry_run``, count) records expired at ``before``."""
        if dry_run:
            with SQLAlchemyReadOnlyUnitOfWork() as uow_ro:
                return uow_ro.refresh_tokens.count_expired(before=before)
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_expired(before=before)
