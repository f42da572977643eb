"""Main CLI entry point."""

import click
from factorybooks.database.factories import create_sqlite_database
from factorybooks.logging_config import configure_logging

# Import and register all commands at module level
from factorybooks.cli.commands import (
    accounts,
    journal,
    ledger,
    report,
    audit,
    depreciation,
    cheque,
    lock_date,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FACTORYBOOKS_DB_PATH environment variable)",
    envvar="FACTORYBOOKS_DB_PATH",
)
@click.option(
    "--tenant",
    help="Tenant whose books to open (overrides FACTORYBOOKS_TENANT environment variable)",
    envvar="FACTORYBOOKS_TENANT",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for structured logs written to stderr",
    envvar="FACTORYBOOKS_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, tenant: str | None, log_level: str):
    """factorybooks - double-entry accounting core.

    Post balanced journal entries, produce trial balances and balance sheets,
    audit the journal against its source records, run monthly depreciation
    and move cheques through their lifecycle.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path, tenant_id=tenant)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
accounts.register_commands(cli)
journal.register_commands(cli)
ledger.register_commands(cli)
report.register_commands(cli)
audit.register_commands(cli)
depreciation.register_commands(cli)
cheque.register_commands(cli)
lock_date.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
