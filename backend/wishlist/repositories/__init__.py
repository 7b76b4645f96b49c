"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from wishlist.repositories.base import BaseRepository
from wishlist.repositories.refresh_token import RefreshTokenRepository
from wishlist.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
