"""Journal commands."""

from datetime import date

import click
from factorybooks.cli.arguments import format_money, resolve_amount, resolve_date
from factorybooks.cli.error_handling import handle_domain_error
from factorybooks.domain.errors import DomainError, NotFoundError, journal_entry_not_found
from factorybooks.domain.posting import JournalPostingEngine
from factorybooks.domain.templates import JOURNAL_TEMPLATES


def resolve_entry_id(db, entry: str) -> str:
    """Resolve an entry number ("JE-000012") or ID to an entry ID.

    Raises:
        NotFoundError: If no entry matches
    """
    if entry.upper().startswith("JE-"):
        for candidate in db.list_journal_entries():
            if candidate.entry_number == entry.upper():
                return candidate.id
        raise NotFoundError(journal_entry_not_found(entry))
    if db.get_journal_entry(entry) is None:
        raise NotFoundError(journal_entry_not_found(entry))
    return entry


@click.group()
def journal_group():
    """Post, list and reverse journal entries."""
    pass


@journal_group.command("templates")
def list_templates():
    """List the journal templates that can be posted."""
    click.echo("\nJournal templates:")
    click.echo("-" * 72)
    for template in JOURNAL_TEMPLATES.values():
        debit = template.debit_account or "(context)"
        credit = template.credit_account or "(context)"
        click.echo(f"{template.id:24s} | DR {debit:9s} | CR {credit:9s} | {template.description}")


@journal_group.command("post")
@click.argument("template_id", metavar="TEMPLATE")
@click.argument("amount", metavar="AMOUNT")
@click.option("--date", "date_str", help="Entry date (default: today)")
@click.option("--description", "-d", default="", help="Entry description")
@click.option("--category", help="Category used to pick the revenue or expense account")
@click.option("--sub-category", help="Sub-category; takes precedence over --category")
@click.option("--on-account", is_flag=True, help="Use AR/AP instead of Cash for ledger templates")
@click.option("--on-credit", is_flag=True, help="Buy a fixed asset on credit instead of for cash")
@click.pass_context
def post_entry(
    ctx,
    template_id: str,
    amount: str,
    date_str: str | None,
    description: str,
    category: str | None,
    sub_category: str | None,
    on_account: bool,
    on_credit: bool,
):
    """Post a manual journal entry from a template.

    Manual entries carry no source document.

    Examples:
        factorybooks journal post OWNER_CAPITAL 50000 --date 2024-01-01
        factorybooks journal post LEDGER_EXPENSE 1200 --category rent
        factorybooks journal post FIXED_ASSET_PURCHASE 12000 --on-credit
    """
    db = ctx.obj["db"]
    engine = JournalPostingEngine(db)

    value = resolve_amount(ctx, amount)
    entry_date = resolve_date(ctx, date_str) or date.today()

    result = engine.post(
        template_id.upper(),
        value,
        entry_date,
        description,
        source=None,
        context={
            "category": category,
            "sub_category": sub_category,
            "is_arap_entry": on_account,
            "on_credit": on_credit,
        },
    )
    if not result.success:
        handle_domain_error(ctx, result.error)
    click.echo(f"Posted {result.entry_number} (ID: {result.journal_entry_id})")


@journal_group.command("list")
@click.option("--start-date", help="Only entries on or after this date")
@click.option("--end-date", help="Only entries on or before this date")
@click.pass_context
def list_entries(ctx, start_date: str | None, end_date: str | None):
    """List journal entries in posting order."""
    db = ctx.obj["db"]

    start = resolve_date(ctx, start_date, "start date")
    end = resolve_date(ctx, end_date, "end date")

    entries = db.list_journal_entries(start_date=start, end_date=end)
    if not entries:
        click.echo("No journal entries found.")
        return

    click.echo("\nJournal entries:")
    click.echo("-" * 96)
    for entry in entries:
        flags = ""
        if entry.is_reversal:
            flags = " [reversal]"
        elif entry.reversed_by_entry_id:
            flags = " [reversed]"
        source = entry.source.source_type.value if entry.source else "manual"
        click.echo(
            f"{entry.entry_number} | {entry.date.isoformat()} | "
            f"DR {entry.debit_account_code} | CR {entry.credit_account_code} | "
            f"{format_money(entry.amount):>14s} | {source:12s} | {entry.description}{flags}"
        )


@journal_group.command("reverse")
@click.argument("entry", metavar="ENTRY")
@click.option("--reason", default="", help="Reason appended to the reversal description")
@click.option("--date", "date_str", help="Reversal date (default: today)")
@click.pass_context
def reverse_entry(ctx, entry: str, reason: str, date_str: str | None):
    """Reverse a journal entry.

    ENTRY can be an entry number (JE-000012) or an entry ID.

    Examples:
        factorybooks journal reverse JE-000012 --reason "posted twice"
    """
    db = ctx.obj["db"]
    engine = JournalPostingEngine(db)

    try:
        entry_id = resolve_entry_id(db, entry)
    except DomainError as e:
        handle_domain_error(ctx, e)

    result = engine.reverse(entry_id, reason=reason, date=resolve_date(ctx, date_str))
    if not result.success:
        handle_domain_error(ctx, result.error)
    click.echo(f"Posted reversal {result.entry_number} for {entry}")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
