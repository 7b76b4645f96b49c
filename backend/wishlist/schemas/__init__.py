"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AccessTokenSchema, EmailLoginQuerySchema, MeSchema, RefreshTokenSchema

__all__ = [
    "AccessTokenSchema",
    "EmailLoginQuerySchema",
    "MeSchema",
    "RefreshTokenSchema",
]
