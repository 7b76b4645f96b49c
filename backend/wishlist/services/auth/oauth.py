"""
Provider profile normalisation.

Each provider reports identity differently; the functions here map the raw
payloads onto :class:`OAuthIdentity`. A profile without a usable email is
rejected with :class:`OAuthProfileError`: the account model is keyed on email.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from wishlist.services._shared.errors import ServiceError
from wishlist.services.auth.dto import OAuthIdentity


class OAuthProfileError(ServiceError):
    """Raised when a provider profile lacks the fields needed to log in."""


def _require(value: Any, field: str, provider: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise OAuthProfileError(f"{provider} profile is missing '{field}'")
    return text


def from_google(userinfo: Mapping[str, Any]) -> OAuthIdentity:
    """Normalise an OpenID Connect ``userinfo`` payload from Google."""
    email = _require(userinfo.get("email"), "email", "google")
    return OAuthIdentity(
        provider="google",
        provider_id=_require(userinfo.get("sub"), "sub", "google"),
        email=email,
        name=userinfo.get("name") or email.split("@")[0],
        avatar=userinfo.get("picture"),
    )


def from_facebook(profile: Mapping[str, Any]) -> OAuthIdentity:
    """Normalise a Graph API ``/me?fields=id,name,email,picture`` payload."""
    email = _require(profile.get("email"), "email", "facebook")
    picture = ((profile.get("picture") or {}).get("data") or {}).get("url")
    return OAuthIdentity(
        provider="facebook",
        provider_id=_require(profile.get("id"), "id", "facebook"),
        email=email,
        name=profile.get("name") or email.split("@")[0],
        avatar=picture,
    )


def from_github(profile: Mapping[str, Any], emails: Sequence[Mapping[str, Any]] = ()) -> OAuthIdentity:
    """
    Normalise GitHub's ``/user`` payload.

    GitHub hides the email when the user keeps it private; the primary
    verified address from ``/user/emails`` is used instead.
    """
    email = profile.get("email")
    if not email:
        verified = [e for e in emails if e.get("verified")]
        primary = next((e for e in verified if e.get("primary")), None)
        chosen = primary or (verified[0] if verified else None)
        email = chosen.get("email") if chosen else None
    email = _require(email, "email", "github")
    return OAuthIdentity(
        provider="github",
        provider_id=_require(profile.get("id"), "id", "github"),
        email=email,
        name=profile.get("name") or profile.get("login") or email.split("@")[0],
        avatar=profile.get("avatar_url"),
    )


def fetch_identity(provider: str, client: Any, token: Mapping[str, Any]) -> OAuthIdentity:
    """
    Read the signed-in profile through an Authlib ``client`` holding ``token``.

    :raises OAuthProfileError: On unknown providers or incomplete profiles.
    """
    if provider == "google":
        userinfo = token.get("userinfo") or client.userinfo(token=token)
        return from_google(userinfo)
    if provider == "facebook":
        resp = client.get("me", params={"fields": "id,name,email,picture"}, token=token)
        resp.raise_for_status()
        return from_facebook(resp.json())
    if provider == "github":
        resp = client.get("user", token=token)
        resp.raise_for_status()
        profile = resp.json()
        emails: list[dict[str, Any]] = []
        if not profile.get("email"):
            emails_resp = client.get("user/emails", token=token)
            emails_resp.raise_for_status()
            emails = emails_resp.json()
        return from_github(profile, emails)
    raise OAuthProfileError(f"Unsupported provider {provider!r}")
