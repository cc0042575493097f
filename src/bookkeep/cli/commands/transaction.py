"""Transaction commands."""

import click
from bookkeep.cli.error_handling import handle_domain_error
from bookkeep.cli.user_resolution import resolve_user_or_exit
from bookkeep.domain.entities import MatchStatus
from bookkeep.domain.errors import DomainError
from bookkeep.domain.transaction import TransactionService


@click.group()
def transaction_group():
    """View and categorize transactions."""
    pass


@transaction_group.command("list")
@click.option("--user", "email", required=True, help="Owner email")
@click.option("--account", "account_id", help="Only this bank account")
@click.option("--statement", "statement_id", help="Only transactions from this statement")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.pass_context
def list_transactions(
    ctx, email: str, account_id: str | None, statement_id: str | None, limit: int | None
):
    """List transactions, newest first."""
    user = resolve_user_or_exit(ctx, email)
    service = TransactionService(ctx.obj["db"])

    txns = service.list_transactions(
        user.id, bank_account_id=account_id, statement_id=statement_id
    )
    if limit is not None:
        txns = txns[:limit]
    if not txns:
        click.echo("No transactions found.")
        return

    for txn in txns:
        category = txn.category or "Uncategorized"
        click.echo(
            f"{txn.id} | {txn.transaction_date} | {txn.amount:>12} {txn.currency} | "
            f"{txn.description[:40]:40s} | {category} | {txn.status.value}"
        )
    click.echo(f"\nTotal: {len(txns)} transactions")


@transaction_group.command("categorize")
@click.argument("transaction_id")
@click.option("--user", "email", required=True, help="Owner email")
@click.option("--category", required=True, help="Category name, or empty string to clear")
@click.option("--vendor", help="Vendor name")
@click.pass_context
def categorize_transaction(
    ctx, transaction_id: str, email: str, category: str, vendor: str | None
):
    """Assign a category (and optionally a vendor) to a transaction.

    Examples:
        bookkeep transaction categorize 9b1c... --user alice@example.com --category Groceries
        bookkeep transaction categorize 9b1c... --user alice@example.com --category ""
    """
    user = resolve_user_or_exit(ctx, email)
    service = TransactionService(ctx.obj["db"])

    try:
        service.categorize(user.id, transaction_id, category, vendor=vendor)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if category.strip():
        click.echo(f"Categorized transaction {transaction_id} as '{category.strip()}'")
    else:
        click.echo(f"Cleared category for transaction {transaction_id}")


@transaction_group.command("status")
@click.argument("transaction_id")
@click.argument("status", type=click.Choice([s.value for s in MatchStatus]))
@click.option("--user", "email", required=True, help="Owner email")
@click.option("--invoice", "invoice_id", help="Invoice ID (required for 'matched')")
@click.pass_context
def set_status(ctx, transaction_id: str, status: str, email: str, invoice_id: str | None):
    """Set a transaction's invoice matching status."""
    user = resolve_user_or_exit(ctx, email)
    service = TransactionService(ctx.obj["db"])

    try:
        service.set_match_status(user.id, transaction_id, status, invoice_id=invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Transaction {transaction_id} marked {status}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
