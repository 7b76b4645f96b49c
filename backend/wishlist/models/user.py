"""User model holding an OAuth-backed account."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from wishlist.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken

PROVIDERS = ("google", "facebook", "github", "apple", "local")


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account created on first OAuth login.

    Fields
    ------
    name : str
        Display name reported by the provider.
    email : str
        Stored normalized (lowercase, trimmed). One account per email.
    provider : str
        Provider the account was created with.
    provider_id : str
        Subject identifier issued by ``provider``.
    avatar : str | None
        Optional picture URL.
    last_login_at : datetime | None
        Touched on every returning login.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("provider", "provider_id", name="uq_users_provider_provider_id"),
        Index("ix_users_provider_provider_id", "provider", "provider_id"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        if "@" not in v:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("provider")
    def _validate_provider(self, key: str, value: str) -> str:
        if value not in PROVIDERS:
            raise ValueError(f"Unsupported provider {value!r}.")
        return value
