"""User repository: account lookups and creation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import cast

from sqlalchemy import select

from wishlist.models.user import User
from wishlist.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never decides provider policy or issues tokens; the auth service does.
    """

    model = User

    def _filterable_fields(self):
        return {
            "email": User.email,
            "provider": User.provider,
            "provider_id": User.provider_id,
        }

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def get_by_provider(self, provider: str, provider_id: str) -> User | None:
        """Fetch the account bound to ``(provider, provider_id)``.

        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.provider == provider, User.provider_id == provider_id)
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def create(
        self,
        *,
        name: str,
        email: str,
        provider: str,
        provider_id: str,
        avatar: str | None = None,
    ) -> User:
        """Insert a new account and flush.

        Uniqueness of email and ``(provider, provider_id)`` is enforced by the
        database; the resulting :class:`~sqlalchemy.exc.IntegrityError`
        propagates to the caller.
        """
        user = User(
            name=name,
            email=email,
            provider=provider,
            provider_id=provider_id,
            avatar=avatar,
            last_login_at=datetime.now(timezone.utc),
        )
        return self.add(user)

    def touch_last_login(self, user_id: str, *, at: datetime | None = None) -> None:
        """Record a returning login. Only ``last_login_at`` changes."""
        user = self.get(user_id)
        if user is None:
            raise ValueError(f"User {user_id} not found.")
        user.last_login_at = at or datetime.now(timezone.utc)
        self.flush()
