"""
wishlist.services._shared.ports
===============================

*Ports* (hexagonal interfaces) for session-token infrastructure.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` and the decoded-claims DTOs.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenView` and an
    in-memory implementation for unit tests.

Concrete adapters (PyJWT, SQL, Redis) live under ``wishlist.infra``.
"""

from __future__ import annotations

from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    RefreshTokenView,
)
from .token_provider import (
    AccessTokenClaims,
    RefreshTokenClaims,
    TokenPair,
    TokenProvider,
)

__all__ = [
    "AccessTokenClaims",
    "InMemoryRefreshTokenStore",
    "RefreshTokenClaims",
    "RefreshTokenStore",
    "RefreshTokenView",
    "TokenPair",
    "TokenProvider",
]
