"""Main CLI entry point."""

import click

from bookkeep.config import LOG_LEVELS, load_settings
from bookkeep.database.factories import create_sqlite_database
from bookkeep.domain.errors import ConfigurationError
from bookkeep.logging_config import setup_logging
from bookkeep.storage import LocalStatementStorage

# Import and register all commands at module level
from bookkeep.cli.commands import (
    account,
    import_cmd,
    serve,
    statement,
    transaction,
    user,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BOOKKEEP_DB_PATH environment variable)",
    envvar="BOOKKEEP_DB_PATH",
)
@click.option(
    "--storage-root",
    type=click.Path(file_okay=False),
    help="Directory holding uploaded statements (overrides BOOKKEEP_STORAGE_ROOT)",
    envvar="BOOKKEEP_STORAGE_ROOT",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (overrides BOOKKEEP_LOG_LEVEL)",
)
@click.option("--log-json", is_flag=True, default=None, help="Emit logs as JSON lines")
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    storage_root: str | None,
    log_level: str | None,
    log_json: bool | None,
):
    """Bookkeep - bank statement ingestion.

    Import bank statements into per-account transaction ledgers without
    duplicating transactions across overlapping uploads.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is None:
        return

    try:
        settings = load_settings().with_overrides(
            database_path=db_path,
            storage_root=storage_root,
            log_level=log_level.upper() if log_level else None,
            log_json=log_json,
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    setup_logging(settings.log_level, use_json=settings.log_json)

    db = create_sqlite_database(database_path=settings.database_path)
    db.connect()
    db.initialize_schema()
    ctx.call_on_close(db.disconnect)

    ctx.obj["db"] = db
    ctx.obj["settings"] = settings
    ctx.obj["storage"] = LocalStatementStorage(settings.storage_root)


# Register all commands
user.register_commands(cli)
account.register_commands(cli)
import_cmd.register_commands(cli)
statement.register_commands(cli)
transaction.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
