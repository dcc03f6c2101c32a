"""Flask CLI commands for account administration."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from samplecat.models import Role, User
from samplecat.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


def _load(uow: SQLAlchemyUnitOfWork, username: str) -> User:
    user = uow.users.get_by_username(username)
    if user is None:
        raise click.ClickException(f"User {username!r} not found")
    return user


@click.group("users")
def users_cli() -> None:
    """Manage user accounts."""


@users_cli.command("unlock")
@click.argument("username")
@with_appcontext
def unlock(username: str) -> None:
    """Reset failed login attempts and clear the account lock."""
    with SQLAlchemyUnitOfWork() as uow:
        user = _load(uow, username)
        user.reset_failed_login_attempts()
    LOGGER.info("Account unlocked", extra={"username": username})
    click.echo(f"Unlocked {username}")


@users_cli.command("set-role")
@click.argument("username")
@click.argument("role", type=click.Choice([r.value for r in Role], case_sensitive=False))
@with_appcontext
def set_role(username: str, role: str) -> None:
    """Assign USER, ADMIN or MODERATOR."""
    with SQLAlchemyUnitOfWork() as uow:
        user = _load(uow, username)
        user.role = Role(role.upper())
    click.echo(f"{username} is now {role.upper()}")


def _set_enabled(username: str, enabled: bool) -> None:
    with SQLAlchemyUnitOfWork() as uow:
        user = _load(uow, username)
        user.enabled = enabled
    state = "enabled" if enabled else "disabled"
    LOGGER.info("Account %s", state, extra={"username": username})
    click.echo(f"{username} {state}")


@users_cli.command("disable")
@click.argument("username")
@with_appcontext
def disable(username: str) -> None:
    """Prevent the account from logging in."""
    _set_enabled(username, False)


@users_cli.command("enable")
@click.argument("username")
@with_appcontext
def enable(username: str) -> None:
    _set_enabled(username, True)
