"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: no Flask, no HTTP. They are the
stable contract between repositories, stores and application services.

The translation to HTTP responses (RFC 7807) is handled by
``wishlist/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name in the message. SQLite only reports
    the offending columns (``UNIQUE constraint failed: users.email``), so the
    known column signatures are matched as well.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    columns = _SQLITE_UNIQUE_COLUMNS.get(constraint_name)
    return bool(columns) and f"unique constraint failed: {columns}" in message


_SQLITE_UNIQUE_COLUMNS = {
    "uq_users_email": "users.email",
    "uq_users_provider_provider_id": "users.provider, users.provider_id",
    "uq_refresh_tokens_token_id": "refresh_tokens.token_id",
}


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them through ``BaseService.translate_exceptions``.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True)
class ProviderConflictError(ServiceError):
    """
    Raised when an email already belongs to an account of another provider.

    The account is never linked or created; the caller is told which
    provider to use instead.

    :param existing_provider: Provider the email is registered with.
    :param attempted_provider: Provider used for the rejected login.
    :param email: Normalised email that collided.
    """

    existing_provider: str
    attempted_provider: str
    email: str | None = None

    def __str__(self) -> str:
        return (
            f"This email is already registered with {self.existing_provider}. "
            f"Please use {self.existing_provider} to log in."
        )


class AuthenticationError(ServiceError):
    """Base for credential failures surfaced as HTTP 401."""

    default_message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MissingTokenError(ServiceError):
    """Raised when a refresh request carries no token."""

    def __init__(self, message: str = "Refresh token is required") -> None:
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a refresh token fails signature, expiry or shape checks."""

    default_message = "Invalid or expired refresh token"


class RevokedTokenError(AuthenticationError):
    """Raised when a verified refresh token is revoked, unknown or past its record expiry."""

    default_message = "Refresh token has been revoked"
