"""Authentication endpoints: OAuth login, token refresh, logout and identity."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import requests
from authlib.integrations.base_client import OAuthError
from flask import Blueprint, abort, current_app, redirect, request, url_for

from wishlist.api.deps import (
    current_identity,
    get_auth_service,
    json_response,
    require_auth,
    timing,
)
from wishlist.core.errors import BadRequest
from wishlist.core.oauth import get_client
from wishlist.schemas import (
    AccessTokenSchema,
    EmailLoginQuerySchema,
    MeSchema,
    RefreshTokenSchema,
)
from wishlist.services._shared.errors import ProviderConflictError, ServiceError
from wishlist.services.auth.dto import LogoutIn, OAuthIdentity, RefreshIn
from wishlist.services.auth.oauth import fetch_identity

bp = Blueprint("auth", __name__, url_prefix="/auth")

log = logging.getLogger(__name__)

refresh_schema = RefreshTokenSchema()
access_token_schema = AccessTokenSchema()
me_schema = MeSchema()
email_login_schema = EmailLoginQuerySchema()

PROVIDER_RULE = "<any(google, facebook, github):provider>"


def _json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _frontend_url(path: str, *, query: dict[str, str] | None = None, fragment: dict[str, str] | None = None) -> str:
    url = current_app.config.get("FRONTEND_URL", "http://localhost:3000").rstrip("/") + path
    if query:
        url += "?" + urlencode(query)
    if fragment:
        url += "#" + urlencode(fragment)
    return url


def _complete_login(identity: OAuthIdentity):
    """Resolve the account, mint a token pair and hand it to the frontend.

    Tokens travel in the URL fragment so they never reach server logs.
    """
    service = get_auth_service()
    try:
        user = service.find_or_create_user(identity)
    except ProviderConflictError as exc:
        return redirect(
            _frontend_url(
                "/auth/provider-mismatch",
                query={
                    "attemptedWith": exc.attempted_provider,
                    "registeredWith": exc.existing_provider,
                },
            )
        )
    except ServiceError:
        log.warning("OAuth login failed", extra={"provider": identity.provider}, exc_info=True)
        return redirect(_frontend_url("/login", query={"error": "auth_failed"}))
    pair = service.issue_token_pair(user)
    log.info("OAuth login successful: %s", user.id, extra={"user_id": user.id, "provider": user.provider})
    return redirect(
        _frontend_url(
            "/auth/callback",
            fragment={"access_token": pair.access_token, "refresh_token": pair.refresh_token},
        )
    )


# ------------------------------------------------------------------ #
# Token endpoints
# ------------------------------------------------------------------ #


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new access token (no rotation)."""

    data = refresh_schema.load(_json_body())
    service = get_auth_service()
    try:
        result = service.refresh(RefreshIn(refresh_token=data["refresh_token"]))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    log.info("Access token refreshed for user: %s", result.user_id, extra={"user_id": result.user_id})
    return json_response({"data": access_token_schema.dump({"access_token": result.access_token})})


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented refresh token. Always succeeds for the client."""

    token = _json_body().get("refreshToken")
    service = get_auth_service()
    user_id = service.logout(LogoutIn(refresh_token=token if isinstance(token, str) else None))
    if user_id:
        log.info("User logged out: %s", user_id, extra={"user_id": user_id})
    return json_response({"data": None})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the identity carried by the access token."""

    return json_response({"data": me_schema.dump(current_identity())})


# ------------------------------------------------------------------ #
# OAuth handshakes
# ------------------------------------------------------------------ #


@bp.get("/test-login")
@timing
def test_login():
    """Log in as ``email`` without a provider round-trip (testing only)."""

    if not current_app.config.get("ENABLE_TEST_LOGIN"):
        abort(404)
    args = email_login_schema.load(request.args)
    email = (args["email"] or "").strip()
    if not email:
        raise BadRequest("Email query parameter is required")
    identity = OAuthIdentity(
        provider=args["provider"],
        provider_id=f"test-{email}",
        email=email,
        name="Test User",
    )
    return _complete_login(identity)


@bp.get(f"/{PROVIDER_RULE}")
def oauth_login(provider: str):
    """Redirect the browser to the provider's consent screen."""

    client = get_client(provider)
    if client is None:
        abort(404)
    callback = url_for("auth.oauth_callback", provider=provider, _external=True)
    return client.authorize_redirect(callback)


@bp.get(f"/{PROVIDER_RULE}/callback")
@timing
def oauth_callback(provider: str):
    """Finish the handshake and redirect to the frontend with a token pair."""

    client = get_client(provider)
    if client is None:
        abort(404)
    try:
        token = client.authorize_access_token()
        identity = fetch_identity(provider, client, token)
    except (OAuthError, ServiceError, requests.RequestException):
        log.warning("OAuth callback failed", extra={"provider": provider}, exc_info=True)
        return redirect(_frontend_url("/login", query={"error": "auth_failed"}))
    return _complete_login(identity)
