"""Statement inspection commands."""

import click
from bookkeep.cli.error_handling import handle_domain_error
from bookkeep.cli.user_resolution import resolve_user_or_exit
from bookkeep.domain.errors import DomainError
from bookkeep.domain.statement import StatementService


@click.group()
def statement_group():
    """Inspect imported statements."""
    pass


@statement_group.command("list")
@click.option("--user", "email", required=True, help="Owner email")
@click.option("--account", "account_id", help="Only statements for this bank account")
@click.pass_context
def list_statements(ctx, email: str, account_id: str | None):
    """List statements, newest first."""
    user = resolve_user_or_exit(ctx, email)
    service = StatementService(ctx.obj["db"])

    statements = service.list_statements(user.id, bank_account_id=account_id)
    if not statements:
        click.echo("No statements found.")
        return

    click.echo(f"{'ID':36s} | {'Uploaded':16s} | {'Status':7s} | {'Txns':>4s} | File")
    click.echo("-" * 100)
    for st in statements:
        click.echo(
            f"{st.id:36s} | {st.uploaded_at:%Y-%m-%d %H:%M} | {st.status.value:7s} | "
            f"{st.transactions_count:4d} | {st.filename}"
        )


@statement_group.command("show")
@click.argument("statement_id")
@click.option("--user", "email", required=True, help="Owner email")
@click.pass_context
def show_statement(ctx, statement_id: str, email: str):
    """Show one statement's status."""
    user = resolve_user_or_exit(ctx, email)
    service = StatementService(ctx.obj["db"])

    try:
        st = service.get_owned_statement(user.id, statement_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Statement: {st.id}")
    click.echo(f"  File: {st.filename}")
    click.echo(f"  Storage path: {st.storage_path}")
    click.echo(f"  Account: {st.bank_account_id} ({st.source_bank})")
    click.echo(f"  Status: {st.status.value}")
    click.echo(f"  Transactions: {st.transactions_count}")
    if st.error_message:
        click.echo(f"  Error: {st.error_message}")


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
