"""Chart of accounts commands."""

import click
from factorybooks.domain.chart_of_accounts import ChartOfAccountsService


@click.group()
def accounts_group():
    """Manage the chart of accounts."""
    pass


@accounts_group.command("seed")
@click.pass_context
def seed_accounts(ctx):
    """Insert any missing standard account.

    Safe to run repeatedly; accounts that already exist are left alone.
    """
    db = ctx.obj["db"]
    service = ChartOfAccountsService(db)

    inserted = service.seed()
    if inserted:
        click.echo(f"Seeded {inserted} accounts.")
    else:
        click.echo("Chart of accounts already seeded.")


@accounts_group.command("list")
@click.option("--localized", is_flag=True, help="Show localized account names")
@click.pass_context
def list_accounts(ctx, localized: bool):
    """List all accounts."""
    db = ctx.obj["db"]
    service = ChartOfAccountsService(db)

    accounts = service.list_accounts()
    click.echo("\nChart of Accounts:")
    click.echo("-" * 72)
    for acc in accounts:
        name = acc.name_localized if localized else acc.name
        marker = " (contra)" if acc.is_contra else ""
        click.echo(
            f"{acc.code:6s} | {name:32s} | {acc.type.value:9s} | {acc.normal_side.value}{marker}"
        )


def register_commands(cli):
    """Register chart of accounts commands with main CLI."""
    cli.add_command(accounts_group, name="accounts")
