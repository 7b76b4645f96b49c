"""Flask CLI commands for refresh-token maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from wishlist.api.deps import get_auth_service
from wishlist.infra.sql.sql_refresh_token_store import SQLRefreshTokenStore
from wishlist.services._shared.base import now_utc

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token maintenance commands."""


@tokens_cli.command("revoke-user")
@click.argument("user_id")
@with_appcontext
def revoke_user(user_id: str) -> None:
    """Delete every refresh-token record of USER_ID (forces a new login)."""
    removed = get_auth_service().delete_user_refresh_tokens(user_id)
    LOGGER.info("Deleted refresh tokens for user: %s", user_id, extra={"user_id": user_id})
    click.echo(f"Removed {removed} refresh token(s) for user {user_id}.")


@tokens_cli.command("prune-expired")
@click.option("--dry-run", is_flag=True, help="Only count the records that would be deleted.")
@with_appcontext
def prune_expired(dry_run: bool) -> None:
    """Delete expired refresh-token records from the relational store."""
    store = get_auth_service().refresh_store
    if not isinstance(store, SQLRefreshTokenStore):
        click.echo("The configured store expires records on its own; nothing to prune.")
        return
    count = store.prune_expired(before=now_utc(), dry_run=dry_run)
    verb = "Would delete" if dry_run else "Deleted"
    click.echo(f"{verb} {count} expired refresh token(s).")
