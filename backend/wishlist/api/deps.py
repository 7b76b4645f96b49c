"""Shared API helpers for authentication and cross-cutting concerns."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from wishlist.core.errors import Unauthorized, problem_response
from wishlist.services._shared.ports import TokenProvider
from wishlist.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

AUTH_SERVICE_KEY = "wishlist.auth_service"
TOKEN_PROVIDER_KEY = "wishlist.token_provider"

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    """Identity carried by a verified access token."""

    user_id: str
    email: str | None
    provider: str | None


def get_auth_service() -> AuthService:
    """Return the :class:`AuthService` built by the application factory."""
    return cast(AuthService, current_app.extensions[AUTH_SERVICE_KEY])


def get_token_provider() -> TokenProvider:
    return cast(TokenProvider, current_app.extensions[TOKEN_PROVIDER_KEY])


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token.

    On success the identity is available through :func:`current_identity`.
    Every failure (missing header, wrong scheme, bad signature, expiry)
    yields the same 401 problem response; the database is never consulted.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = _bearer_token()
        claims = get_token_provider().verify_access_token(token) if token else None
        if claims is None:
            return problem_response(Unauthorized(INVALID_TOKEN_MESSAGE, code="invalid_token").to_problem())
        g.auth_identity = AuthIdentity(
            user_id=claims.user_id,
            email=claims.email,
            provider=claims.provider,
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_identity() -> AuthIdentity:
    """Return the identity attached by :func:`require_auth`."""
    identity = g.get("auth_identity")
    if identity is None:
        raise Unauthorized(INVALID_TOKEN_MESSAGE, code="invalid_token")
    return cast(AuthIdentity, identity)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
