from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class OAuthIdentity:
    """
    Normalised profile returned by an OAuth provider.

    :param provider: Provider name (``google``, ``facebook``, ``github``...).
    :type provider: str
    :param provider_id: Subject identifier issued by the provider.
    :type provider_id: str
    :param email: Verified email reported by the provider.
    :type email: str
    :param name: Display name.
    :type name: str
    :param avatar: Optional picture URL.
    :type avatar: str | None
    """

    provider: str
    provider_id: str
    email: str
    name: str
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT; ``None`` when the body omitted it.
        Any other JSON value is carried through and rejected as malformed.
    :type refresh_token: object
    """

    refresh_token: object


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Encoded refresh JWT, if the client still has one.
    :type refresh_token: str | None
    """

    refresh_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public view of an account.

    :param id: Opaque user id.
    :type id: str
    """

    id: str
    name: str
    email: str
    provider: str
    avatar: str | None
    created_at: datetime | None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RefreshOut:
    """
    Output DTO of a successful refresh.

    The refresh token is not rotated, so only a new access token is returned.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param user_id: Owner of the refresh token, for audit logging.
    :type user_id: str
    """

    access_token: str
    user_id: str
