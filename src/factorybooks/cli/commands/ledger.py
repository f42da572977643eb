"""Ledger entry commands."""

from datetime import date

import click
from factorybooks.cli.arguments import format_money, resolve_amount, resolve_date
from factorybooks.cli.error_handling import handle_domain_error
from factorybooks.domain.entities import LedgerType, PaymentStatus
from factorybooks.domain.errors import DomainError, ValidationError
from factorybooks.domain.posting import JournalPostingEngine


@click.group()
def ledger_group():
    """Record business transactions and post them to the journal."""
    pass


@ledger_group.command("add")
@click.argument("entry_type", metavar="TYPE", type=click.Choice([t.value for t in LedgerType]))
@click.argument("amount", metavar="AMOUNT")
@click.option("--category", help="Category, e.g. 'sales', 'rent', 'owner capital'")
@click.option("--sub-category", help="Sub-category")
@click.option("--date", "date_str", help="Transaction date (default: today)")
@click.option("--description", "-d", default="", help="Description")
@click.option("--on-account", is_flag=True, help="Unpaid: book against AR/AP instead of Cash")
@click.pass_context
def add_entry(
    ctx,
    entry_type: str,
    amount: str,
    category: str | None,
    sub_category: str | None,
    date_str: str | None,
    description: str,
    on_account: bool,
):
    """Record a ledger entry and post its journal entry.

    Examples:
        factorybooks ledger add income 5000 --category sales
        factorybooks ledger add expense 800 --category rent --date 2024-02-01
        factorybooks ledger add income 3000 --category sales --on-account
        factorybooks ledger add equity 20000 --description "Owner contribution"
        factorybooks ledger add loan 15000 --description "Bank loan"
    """
    db = ctx.obj["db"]
    engine = JournalPostingEngine(db)

    value = resolve_amount(ctx, amount)
    if value <= 0:
        handle_domain_error(ctx, ValidationError(f"Amount must be greater than zero (got {amount})"))
    entry_date = resolve_date(ctx, date_str) or date.today()

    try:
        entry_id = db.create_ledger_entry(
            type=LedgerType(entry_type),
            amount=value,
            date=entry_date,
            description=description,
            category=category,
            sub_category=sub_category,
            is_arap_entry=on_account,
            payment_status=PaymentStatus.UNPAID if on_account else PaymentStatus.PAID,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    result = engine.post_ledger_entry(db.get_ledger_entry(entry_id))
    if not result.success:
        click.echo(f"Recorded ledger entry {entry_id} but posting failed.", err=True)
        handle_domain_error(ctx, result.error)
    click.echo(f"Recorded ledger entry {entry_id} and posted {result.entry_number}")


@ledger_group.command("list")
@click.pass_context
def list_entries(ctx):
    """List ledger entries."""
    db = ctx.obj["db"]

    entries = db.list_ledger_entries()
    if not entries:
        click.echo("No ledger entries found.")
        return

    click.echo("\nLedger entries:")
    click.echo("-" * 96)
    for entry in entries:
        click.echo(
            f"{entry.id} | {entry.date.isoformat()} | {entry.type.value:7s} | "
            f"{format_money(entry.amount):>14s} | {entry.payment_status.value:7s} | "
            f"{entry.category or '':16s} | {entry.description}"
        )


@ledger_group.command("delete")
@click.argument("entry_id", metavar="ENTRY_ID")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: str, yes: bool):
    """Delete a ledger entry.

    Its journal entries are kept; 'audit cleanup-orphans' removes them.
    """
    db = ctx.obj["db"]

    if not yes and not click.confirm(f"Are you sure you want to delete ledger entry {entry_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        db.delete_ledger_entry(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted ledger entry {entry_id}")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
