"""User management commands."""

import click
from bookkeep.domain.user import UserService


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("email")
@click.pass_context
def create_user(ctx, email: str):
    """Create a user and print their API token.

    The token is shown once; only its hash is stored.

    Examples:
        bookkeep user create alice@example.com
    """
    service = UserService(ctx.obj["db"])

    try:
        user_id, token = service.create_user(email)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Created user '{email.strip().lower()}' (ID: {user_id})")
    click.echo(f"API token: {token}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
