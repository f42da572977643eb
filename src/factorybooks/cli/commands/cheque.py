"""Cheque commands."""

import click
from factorybooks.cli.arguments import format_money, resolve_amount, resolve_date
from factorybooks.cli.error_handling import handle_domain_error
from factorybooks.domain.cheques import ChequeService
from factorybooks.domain.entities import ChequeDirection, ChequeStatus
from factorybooks.domain.errors import DomainError


@click.group()
def cheque_group():
    """Register cheques and move them through their lifecycle."""
    pass


@cheque_group.command("add")
@click.argument("cheque_number", metavar="NUMBER")
@click.argument("amount", metavar="AMOUNT")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in ChequeDirection]),
    default=ChequeDirection.INCOMING.value,
    show_default=True,
)
@click.option("--due-date", help="Due date")
@click.option("--ledger-entry", "linked_transaction_id", help="ID of the ledger entry it settles")
@click.pass_context
def add_cheque(
    ctx,
    cheque_number: str,
    amount: str,
    direction: str,
    due_date: str | None,
    linked_transaction_id: str | None,
):
    """Register a pending cheque. Nothing is posted until it is cashed."""
    db = ctx.obj["db"]
    service = ChequeService(db)

    try:
        cheque = service.create_cheque(
            cheque_number=cheque_number,
            amount=resolve_amount(ctx, amount),
            direction=ChequeDirection(direction),
            due_date=resolve_date(ctx, due_date, "due date"),
            linked_transaction_id=linked_transaction_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Registered cheque {cheque.cheque_number} (ID: {cheque.id})")


@cheque_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in ChequeStatus]), help="Filter by status")
@click.pass_context
def list_cheques(ctx, status: str | None):
    """List cheques."""
    db = ctx.obj["db"]

    cheques = db.list_cheques(status=ChequeStatus(status) if status else None)
    if not cheques:
        click.echo("No cheques found.")
        return

    click.echo("\nCheques:")
    click.echo("-" * 96)
    for cheque in cheques:
        due = cheque.due_date.isoformat() if cheque.due_date else "-"
        click.echo(
            f"{cheque.id} | {cheque.cheque_number:12s} | {cheque.direction.value:8s} | "
            f"{format_money(cheque.amount):>14s} | {due:10s} | {cheque.status.value}"
        )


def _transition(ctx, action: str, cheque_id: str, date_str: str | None) -> None:
    db = ctx.obj["db"]
    service = ChequeService(db)

    on_date = resolve_date(ctx, date_str)
    try:
        result = getattr(service, action)(cheque_id, on_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result.success:
        click.echo(
            f"Cheque moved to {result.new_status.value} but its journal entry failed.",
            err=True,
        )
        click.echo(f"Error: {result.error}", err=True)
        ctx.exit(1)
    message = f"Cheque {cheque_id}: {result.previous_status.value} -> {result.new_status.value}"
    if result.journal_entry_id:
        message += f" (journal entry {result.journal_entry_id})"
    click.echo(message)


@cheque_group.command("cash")
@click.argument("cheque_id", metavar="CHEQUE_ID")
@click.option("--date", "date_str", help="Cashing date (default: today)")
@click.pass_context
def cash_cheque(ctx, cheque_id: str, date_str: str | None):
    """Cash a pending cheque and post its cash entry."""
    _transition(ctx, "cash", cheque_id, date_str)


@cheque_group.command("bounce")
@click.argument("cheque_id", metavar="CHEQUE_ID")
@click.option("--date", "date_str", help="Bounce date (default: today)")
@click.pass_context
def bounce_cheque(ctx, cheque_id: str, date_str: str | None):
    """Bounce a cheque. A cashed cheque has its cash entry reversed."""
    _transition(ctx, "bounce", cheque_id, date_str)


def register_commands(cli):
    """Register cheque commands with main CLI."""
    cli.add_command(cheque_group, name="cheque")
