"""Flask CLI commands for refresh token maintenance."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from samplecat.core.components import get_refresh_token_store
from samplecat.uow import SQLAlchemyUnitOfWork


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh token maintenance."""


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired() -> None:
    """Delete every refresh token past its expiry."""
    with SQLAlchemyUnitOfWork():
        removed = get_refresh_token_store().purge_expired()
    click.echo(f"Purged {removed} expired refresh token(s)")
