"""Flask CLI commands for operator-only account management."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from forum.models.user import UserRole
from forum.services._shared.errors import NotFoundError
from forum.services.admin import AdminService


def _assign(email: str, role: UserRole) -> None:
    try:
        out = AdminService().assign_role(email, role)
    except NotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{out.email} (id={out.id}) is now {out.role}.")


@click.group("users")
def users_cli() -> None:
    """Manage platform roles."""


@users_cli.command("promote")
@click.argument("email")
@with_appcontext
def promote_command(email: str) -> None:
    """Grant the admin role to the account registered with EMAIL."""
    _assign(email, UserRole.ADMIN)


@users_cli.command("demote")
@click.argument("email")
@with_appcontext
def demote_command(email: str) -> None:
    """Return the account registered with EMAIL to the member role."""
    _assign(email, UserRole.MEMBER)
