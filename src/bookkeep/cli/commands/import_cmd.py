"""Statement import command."""

from datetime import datetime, UTC
from pathlib import Path

import click
from bookkeep.cli.user_resolution import resolve_user_or_exit
from bookkeep.domain.ingestion import IngestionService


def build_storage_path(user_id: str, account_id: str, filename: str) -> str:
    """Storage location for a newly uploaded file: user/account/timestamp-name."""
    timestamp = int(datetime.now(UTC).timestamp() * 1000)
    return f"{user_id}/{account_id}/{timestamp}-{filename}"


@click.command("import")
@click.argument("storage_path", required=False)
@click.option("--account", "account_id", required=True, help="Bank account ID")
@click.option("--user", "email", required=True, help="Owner email")
@click.option(
    "--file",
    "local_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Upload this local file into statement storage before importing",
)
@click.option("--verbose", "-v", is_flag=True, help="Show every skipped row")
@click.pass_context
def import_statement(
    ctx,
    storage_path: str | None,
    account_id: str,
    email: str,
    local_file: str | None,
    verbose: bool,
):
    """Import a bank statement into an account.

    STORAGE_PATH names a file already in statement storage. With --file the
    local file is copied into storage first; STORAGE_PATH may then be omitted.

    Examples:
        bookkeep import u1/a1/1700000000-statement.csv --account a1 --user alice@example.com
        bookkeep import --file ~/Downloads/extrato.xlsx --account a1 --user alice@example.com
    """
    user = resolve_user_or_exit(ctx, email)
    storage = ctx.obj["storage"]

    if local_file is not None:
        local_path = Path(local_file)
        if storage_path is None:
            storage_path = build_storage_path(user.id, account_id, local_path.name)
        try:
            storage.save(storage_path, local_path.read_bytes())
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
    elif storage_path is None:
        click.echo("Error: Provide STORAGE_PATH or --file", err=True)
        ctx.exit(1)

    service = IngestionService(ctx.obj["db"], storage, ctx.obj["settings"])

    try:
        summary = service.ingest(user.id, account_id, storage_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"\nImport complete (statement {summary.statement_id}, {summary.bank_type}):")
    click.echo(f"  Processed: {summary.processed} rows")
    click.echo(f"  Imported: {summary.inserted} transactions")
    click.echo(f"  Skipped: {summary.duplicates} duplicates")
    if summary.not_completed:
        click.echo(f"  Not completed: {summary.not_completed}")
    if summary.errors:
        click.echo(f"  Errors: {summary.errors}")
        messages = summary.error_messages
        for message in messages if verbose else messages[:10]:
            click.echo(f"    {message}", err=True)
        if not verbose and len(messages) > 10:
            click.echo(f"    ... {len(messages) - 10} more (use --verbose)", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
