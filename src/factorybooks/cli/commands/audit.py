"""Journal audit and cleanup commands."""

import click
from factorybooks.cli.arguments import format_money
from factorybooks.domain.audit import ReconciliationService


@click.group()
def audit_group():
    """Check the journal against its source records."""
    pass


@audit_group.command("diagnose")
@click.pass_context
def diagnose(ctx):
    """Count journal entries by link state."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    result = service.diagnose()
    click.echo("\nJournal diagnostics:")
    click.echo("-" * 40)
    click.echo(f"Total entries:            {result.total_entries}")
    click.echo(f"Linked to transaction:    {result.linked_to_transaction}")
    click.echo(f"Linked to payment:        {result.linked_to_payment}")
    click.echo(f"Linked to cheque:         {result.linked_to_cheque}")
    click.echo(f"Unlinked (manual):        {result.unlinked}")
    click.echo(f"Orphaned by transaction:  {result.orphaned_by_transaction}")
    click.echo(f"Orphaned by payment:      {result.orphaned_by_payment}")
    click.echo(f"Orphaned by cheque:       {result.orphaned_by_cheque}")
    if result.entries_by_account:
        click.echo("\nEntries by account:")
        for code, count in result.entries_by_account.items():
            click.echo(f"  {code:6s} {count}")


@audit_group.command("run")
@click.pass_context
def run_audit(ctx):
    """Compare cash movements in the journal with source records.

    Exits with status 1 when mismatches or duplicates are found.
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    result = service.audit()
    click.echo("\nCash totals:")
    click.echo("-" * 48)
    click.echo(f"Journal cash debits:   {format_money(result.total_journal_cash_debits):>18s}")
    click.echo(f"Journal cash credits:  {format_money(result.total_journal_cash_credits):>18s}")
    click.echo(f"Ledger cash in:        {format_money(result.total_ledger_cash_in):>18s}")
    click.echo(f"Ledger cash out:       {format_money(result.total_ledger_cash_out):>18s}")
    click.echo(f"Payment cash in:       {format_money(result.total_payment_cash_in):>18s}")
    click.echo(f"Payment cash out:      {format_money(result.total_payment_cash_out):>18s}")

    if result.mismatches:
        click.echo(f"\nMismatches ({len(result.mismatches)}):")
        for m in result.mismatches:
            click.echo(
                f"  {m.journal_id} -> {m.link_type.value} {m.linked_id}: journal "
                f"{format_money(m.journal_cash_amount)} vs source {format_money(m.source_amount)}"
            )
    if result.duplicates:
        click.echo(f"\nDuplicated sources ({len(result.duplicates)}):")
        for d in result.duplicates:
            click.echo(f"  {d.source_type.value} {d.source_id}: {d.count} entries")

    if result.is_clean:
        click.echo("\nNo mismatches or duplicates found.")
    else:
        ctx.exit(1)


@audit_group.command("cleanup-orphans")
@click.option("--apply", "apply_changes", is_flag=True, help="Delete the entries (default is a dry run)")
@click.option("--include-unlinked", is_flag=True, help="Also delete manual entries with no source")
@click.pass_context
def cleanup_orphans(ctx, apply_changes: bool, include_unlinked: bool):
    """Delete journal entries whose source record no longer exists."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    result = service.cleanup_orphaned(dry_run=not apply_changes, include_unlinked=include_unlinked)
    if not result.candidates:
        click.echo("No orphaned journal entries found.")
        return

    click.echo(f"Found {len(result.candidates)} entries to delete:")
    for entry_id in result.candidates:
        click.echo(f"  {entry_id}")
    if result.dry_run:
        click.echo("\nDry run: nothing deleted. Use --apply to delete.")
        return

    click.echo(f"\nDeleted {result.deleted} entries.")
    if result.errors:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)


@audit_group.command("cleanup-duplicates")
@click.option("--apply", "apply_changes", is_flag=True, help="Delete the entries (default is a dry run)")
@click.pass_context
def cleanup_duplicates(ctx, apply_changes: bool):
    """Keep the earliest entry per source and delete later duplicates."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    result = service.cleanup_duplicates(dry_run=not apply_changes)
    if not result.candidates:
        click.echo("No duplicate journal entries found.")
        return

    click.echo(f"Found {len(result.candidates)} duplicate entries:")
    for entry_id in result.candidates:
        click.echo(f"  {entry_id}")
    if result.dry_run:
        click.echo("\nDry run: nothing deleted. Use --apply to delete.")
        return

    click.echo(f"\nDeleted {result.deleted} entries.")
    if result.errors:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register audit commands with main CLI."""
    cli.add_command(audit_group, name="audit")
