from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from wishlist.core.config import MIN_SECRET_LENGTH, ConfigurationError, parse_duration
from wishlist.services._shared.ports import (
    AccessTokenClaims,
    RefreshTokenClaims,
    TokenPair,
    TokenProvider,
)
from wishlist.services._shared.ports.token_provider import TokenSubject

ALGORITHM = "HS256"


class JWTTokenProvider(TokenProvider):
    """
    HS256 session-token codec built on PyJWT.

    Payloads carry only ``userId``, ``email``, ``provider`` (access) or
    ``userId``, ``tokenId`` (refresh) plus ``iat``/``exp``. Verification
    pins the algorithm and never raises: every failure yields ``None``.

    :param secret: Shared signing secret, at least 32 characters.
    :param access_expires: Access-token lifetime (``"15m"`` by default).
    :param refresh_expires: Refresh-token lifetime (``"30d"`` by default).
    :raises ConfigurationError: When the secret is missing or too short.
    """

    def __init__(
        self,
        secret: str | None,
        *,
        access_expires: str | int | timedelta = "15m",
        refresh_expires: str | int | timedelta = "30d",
    ) -> None:
        if not secret:
            raise ConfigurationError("JWT_SECRET is not set; refusing to start.")
        if len(secret) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters long."
            )
        self._secret = secret
        self.access_expires = parse_duration(access_expires)
        self.refresh_expires = parse_duration(refresh_expires)

    # ------------------------------ issuing ------------------------------

    def _encode(self, claims: dict[str, Any], *, lifetime: timedelta, now: datetime) -> str:
        payload = {**claims, "iat": now, "exp": now + lifetime}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def generate_access_token(
        self, user_id: str, email: str, provider: str, *, now: datetime | None = None
    ) -> str:
        return self._encode(
            {"userId": user_id, "email": email, "provider": provider},
            lifetime=self.access_expires,
            now=now or datetime.now(UTC),
        )

    def generate_refresh_token(
        self, user_id: str, token_id: str, *, now: datetime | None = None
    ) -> str:
        return self._encode(
            {"userId": user_id, "tokenId": token_id},
            lifetime=self.refresh_expires,
            now=now or datetime.now(UTC),
        )

    def generate_token_pair(self, user: TokenSubject) -> TokenPair:
        """
        Mint an access/refresh pair with a fresh 256-bit token id.

        ``expires_at`` matches the refresh token's own ``exp`` and is the
        value the caller must persist in the revocation store.
        """
        now = datetime.now(UTC)
        token_id = secrets.token_hex(32)
        return TokenPair(
            access_token=self.generate_access_token(user.id, user.email, user.provider, now=now),
            refresh_token=self.generate_refresh_token(user.id, token_id, now=now),
            token_id=token_id,
            expires_at=now + self.refresh_expires,
        )

    # ----------------------------- verifying -----------------------------

    def _decode(self, token: object) -> dict[str, Any] | None:
        if not isinstance(token, str) or not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError:
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("userId"), str):
            return None
        return payload

    def verify_access_token(self, token: object) -> AccessTokenClaims | None:
        payload = self._decode(token)
        if payload is None:
            return None
        return AccessTokenClaims(
            user_id=payload["userId"],
            email=_optional_str(payload.get("email")),
            provider=_optional_str(payload.get("provider")),
            issued_at=_timestamp(payload.get("iat")),
            expires_at=_timestamp(payload.get("exp")),
        )

    def verify_refresh_token(self, token: object) -> RefreshTokenClaims | None:
        payload = self._decode(token)
        if payload is None:
            return None
        return RefreshTokenClaims(
            user_id=payload["userId"],
            token_id=_optional_str(payload.get("tokenId")),
            issued_at=_timestamp(payload.get("iat")),
            expires_at=_timestamp(payload.get("exp")),
        )


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _timestamp(value: Any) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return datetime.fromtimestamp(value, tz=UTC)
