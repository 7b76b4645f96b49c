from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    """
    Decoded access-token payload.

    ``email`` and ``provider`` are ``None`` when a refresh token is verified
    as an access token; only ``user_id`` is guaranteed.
    """

    user_id: str
    email: str | None
    provider: str | None
    issued_at: datetime | None
    expires_at: datetime | None


@dataclass(frozen=True, slots=True)
class RefreshTokenClaims:
    """Decoded refresh-token payload; ``token_id`` keys the revocation record."""

    user_id: str
    token_id: str | None
    issued_at: datetime | None
    expires_at: datetime | None


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Freshly minted access/refresh pair.

    :ivar token_id: Identifier embedded in ``refresh_token``.
    :ivar expires_at: Record expiry to persist for ``token_id`` (UTC).
    """

    access_token: str
    refresh_token: str
    token_id: str
    expires_at: datetime


class TokenSubject(Protocol):
    """Minimal user shape needed to mint a pair."""

    id: str
    email: str
    provider: str


class TokenProvider(Protocol):
    """Port for signing and verifying session tokens."""

    def generate_access_token(self, user_id: str, email: str, provider: str) -> str: ...

    def generate_refresh_token(self, user_id: str, token_id: str) -> str: ...

    def generate_token_pair(self, user: TokenSubject) -> TokenPair: ...

    def verify_access_token(self, token: object) -> AccessTokenClaims | None: ...

    def verify_refresh_token(self, token: object) -> RefreshTokenClaims | None: ...
