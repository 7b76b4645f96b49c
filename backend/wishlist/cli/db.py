"""Flask CLI commands for local schema management."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from wishlist.core.extensions import db


@click.group("db")
def db_cli() -> None:
    """Database schema helpers (no migrations)."""


@db_cli.command("create")
@with_appcontext
def create() -> None:
    """Create every table that does not exist yet."""
    db.create_all()
    click.echo(f"Tables created on {db.engine.url.render_as_string(hide_password=True)}")


@db_cli.command("drop")
@click.confirmation_option(prompt="Drop every table?")
@with_appcontext
def drop() -> None:
    """Drop every table. Refused outside debug and testing."""
    if not (current_app.debug or current_app.testing):
        raise click.UsageError("'flask db drop' is restricted to non-production environments.")
    db.drop_all()
    click.echo("Tables dropped.")
