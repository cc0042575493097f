"""CLI helpers for resolving the acting user."""

from __future__ import annotations

import click

from bookkeep.domain.entities import User
from bookkeep.domain.user import UserService


def resolve_user_or_exit(ctx: click.Context, email: str) -> User:
    """Look up a user by email, or exit with a CLI error.

    Commands act on behalf of the user named by --user; this keeps error
    messaging and exit behavior consistent across them.
    """
    user = UserService(ctx.obj["db"]).get_user_by_email(email)
    if user is None:
        click.echo(f"Error: User '{email}' not found", err=True)
        ctx.exit(1)
    return user
