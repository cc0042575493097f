"""Bank account management commands."""

import click
from bookkeep.cli.user_resolution import resolve_user_or_exit
from bookkeep.domain.account import AccountService
from bookkeep.domain.entities import BANK_TYPES


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--user", "email", required=True, help="Owner email")
@click.option(
    "--bank-type",
    required=True,
    type=click.Choice(BANK_TYPES, case_sensitive=False),
    help="Bank identifier; selects the statement format used on import",
)
@click.option("--currency", default="EUR", show_default=True, help="ISO 4217 currency code")
@click.option("--bank", help="Bank display name")
@click.option("--last4", help="Last four digits of the account number")
@click.pass_context
def create_account(
    ctx,
    name: str,
    email: str,
    bank_type: str,
    currency: str,
    bank: str | None,
    last4: str | None,
):
    """Create a new bank account.

    Examples:
        bookkeep account create "Revolut EUR" --user alice@example.com --bank-type revolut
        bookkeep account create "BPI Current" --user alice@example.com --bank-type bpi --last4 1234
    """
    user = resolve_user_or_exit(ctx, email)
    service = AccountService(ctx.obj["db"])

    try:
        account_id = service.create_account(
            user_id=user.id,
            account_name=name,
            bank_type=bank_type,
            currency=currency,
            bank_name=bank,
            account_number_last4=last4,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@account_group.command("list")
@click.option("--user", "email", required=True, help="Owner email")
@click.pass_context
def list_accounts(ctx, email: str):
    """List a user's bank accounts."""
    user = resolve_user_or_exit(ctx, email)
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(user.id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id} | {acc.account_name:20s} | Type: {acc.bank_type:10s} | {acc.currency}"
        )


@account_group.command("rename")
@click.argument("account_id", metavar="ACCOUNT_ID")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--user", "email", required=True, help="Owner email")
@click.option("--bank", help="New bank display name (optional)")
@click.pass_context
def rename_account(ctx, account_id: str, new_name: str, email: str, bank: str | None) -> None:
    """Rename a bank account.

    The bank type cannot be changed.

    Examples:
        bookkeep account rename 3f2a... "Joint Account" --user alice@example.com
    """
    user = resolve_user_or_exit(ctx, email)
    service = AccountService(ctx.obj["db"])

    try:
        service.rename_account(user.id, account_id, new_name, bank_name=bank)
        click.echo(f"Renamed account to '{new_name}'")
        if bank is not None:
            click.echo(f"Bank name updated to '{bank}'")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
