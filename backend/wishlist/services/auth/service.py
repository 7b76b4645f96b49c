from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from wishlist.models.user import User
from wishlist.repositories.user import UserRepository
from wishlist.services._shared.base import BaseService, ServiceContext, now_utc
from wishlist.services._shared.errors import (
    ConflictError,
    InvalidTokenError,
    MissingTokenError,
    NotFoundError,
    ProviderConflictError,
    RevokedTokenError,
    ServiceError,
    violates,
)
from wishlist.services._shared.ports.refresh_token_store import RefreshTokenStore
from wishlist.services._shared.ports.token_provider import TokenProvider
from wishlist.services.auth.dto import (
    LogoutIn,
    OAuthIdentity,
    RefreshIn,
    RefreshOut,
    TokenPairOut,
    UserOut,
)

log = logging.getLogger(__name__)

_USER_UNIQUE_CONSTRAINTS = ("uq_users_email", "uq_users_provider_provider_id")


class AuthService(BaseService):
    """
    Account and session-token lifecycle (OAuth login / refresh / logout).

    Tokens are signed by a pluggable :class:`TokenProvider`; the server-side
    state of each refresh token lives in a :class:`RefreshTokenStore` so it
    can be revoked before it expires.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        refresh_store: RefreshTokenStore,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for signing/verifying JWTs.
        :param refresh_store: Stateful store for refresh-token records.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.refresh_store = refresh_store

    # ------------------------------------------------------------------ #
    # Accounts
    # ------------------------------------------------------------------ #

    def find_or_create_user(self, identity: OAuthIdentity) -> UserOut:
        """
        Resolve the account behind an OAuth login, creating it on first use.

        Lookup order: ``(provider, provider_id)`` first, then email. An email
        already registered with another provider is never linked.

        :param identity: Normalised provider profile.
        :returns: The existing or newly created account.
        :raises ProviderConflictError: Email belongs to another provider's account.
        :raises ConflictError: A concurrent insert won with an unrelated identity.
        """
        email = identity.email.strip().lower()
        if not email:
            raise ServiceError("Email is required")

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get_by_provider(identity.provider, identity.provider_id)
                if user is not None:
                    repo.touch_last_login(user.id)
                    log.info(
                        "Returning user login: %s",
                        user.id,
                        extra={"user_id": user.id, "provider": identity.provider},
                    )
                    return self._to_user_out(user)

                existing = repo.get_by_email(email)
                if existing is not None:
                    raise self._provider_conflict(existing, identity, email)

                user = repo.create(
                    name=identity.name,
                    email=email,
                    provider=identity.provider,
                    provider_id=identity.provider_id,
                    avatar=identity.avatar,
                )
                out = self._to_user_out(user)
            log.info("Created new user: %s", out.id, extra={"user_id": out.id, "provider": out.provider})
            return out
        except IntegrityError as exc:
            if not any(violates(exc, name) for name in _USER_UNIQUE_CONSTRAINTS):
                raise
            # Lost a creation race: re-run the lookups once, without creating.
            with self.ro_uow() as uow_retry:
                repo_retry: UserRepository = uow_retry.users
                winner = repo_retry.get_by_provider(identity.provider, identity.provider_id)
                if winner is not None:
                    return self._to_user_out(winner)
                existing = repo_retry.get_by_email(email)
                if existing is not None:
                    raise self._provider_conflict(existing, identity, email) from exc
            raise ConflictError("User", "account was created concurrently") from exc

    def get_user_by_id(self, user_id: str) -> UserOut | None:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            return self._to_user_out(user) if user is not None else None

    # ------------------------------------------------------------------ #
    # Refresh-token records
    # ------------------------------------------------------------------ #

    def store_refresh_token(self, user_id: str, token_id: str, expires_at: datetime) -> None:
        self.refresh_store.create(token_id=token_id, user_id=user_id, expires_at=expires_at)

    def is_refresh_token_valid(self, token_id: str) -> bool:
        """A record is valid when it exists, is not revoked and has not expired."""
        view = self.refresh_store.get(token_id)
        return view is not None and view.is_usable(now_utc())

    def revoke_refresh_token(self, token_id: str) -> None:
        """Revoke a record. Unknown or already revoked ids are a no-op."""
        self.refresh_store.revoke(token_id)

    def delete_user_refresh_tokens(self, user_id: str) -> int:
        return self.refresh_store.delete_for_user(user_id)

    # ------------------------------------------------------------------ #
    # Token protocol
    # ------------------------------------------------------------------ #

    def issue_token_pair(self, user: UserOut) -> TokenPairOut:
        """
        Mint an access/refresh pair for ``user``.

        The refresh record is stored **before** the pair is returned, so a
        token never reaches a client without server-side state.
        """
        pair = self.tokens.generate_token_pair(user)
        self.store_refresh_token(user.id, pair.token_id, pair.expires_at)
        return TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token)

    def refresh(self, dto: RefreshIn) -> RefreshOut:
        """
        Exchange a refresh token for a new access token.

        :raises MissingTokenError: No token supplied.
        :raises InvalidTokenError: Bad signature, expired or malformed token.
        :raises RevokedTokenError: Record missing, revoked or expired.
        :raises NotFoundError: The owning account no longer exists.
        """
        if dto.refresh_token is None or dto.refresh_token == "":
            raise MissingTokenError()

        claims = self.tokens.verify_refresh_token(dto.refresh_token)
        if claims is None:
            raise InvalidTokenError()

        if not claims.token_id or not self.is_refresh_token_valid(claims.token_id):
            raise RevokedTokenError()

        user = self.get_user_by_id(claims.user_id)
        if user is None:
            raise NotFoundError("User", claims.user_id)

        return RefreshOut(access_token=self._renew_tokens(user), user_id=user.id)

    def logout(self, dto: LogoutIn) -> str | None:
        """
        Revoke the refresh token presented at logout, if any.

        Missing or unverifiable tokens are ignored; logout always succeeds
        from the client's point of view. Store failures still propagate.

        :returns: The owner's user id when a token was revoked, else ``None``.
        """
        if not dto.refresh_token:
            return None
        claims = self.tokens.verify_refresh_token(dto.refresh_token)
        if claims is None or not claims.token_id:
            return None
        self.revoke_refresh_token(claims.token_id)
        return claims.user_id

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _renew_tokens(self, user: UserOut) -> str:
        # Refresh tokens are not rotated: the presented one stays valid until
        # it expires or is revoked, and only a new access token is issued.
        return self.tokens.generate_access_token(user.id, user.email, user.provider)

    @staticmethod
    def _provider_conflict(existing: User, identity: OAuthIdentity, email: str) -> ProviderConflictError:
        log.warning(
            "Email already registered with provider %s; rejected login with %s",
            existing.provider,
            identity.provider,
            extra={"provider": existing.provider, "attempted_provider": identity.provider},
        )
        return ProviderConflictError(
            existing_provider=existing.provider,
            attempted_provider=identity.provider,
            email=email,
        )

    @staticmethod
    def _to_user_out(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            name=user.name,
            email=user.email,
            provider=user.provider,
            avatar=user.avatar,
            created_at=user.created_at,
        )
