"""Lock date commands."""

import click
from factorybooks.cli.arguments import resolve_date


@click.group()
def lock_date_group():
    """Close periods to posting."""
    pass


@lock_date_group.command("show")
@click.pass_context
def show_lock_date(ctx):
    """Show the current lock date."""
    db = ctx.obj["db"]

    lock_date = db.get_lock_date()
    if lock_date is None:
        click.echo("No lock date set.")
    else:
        click.echo(f"Lock date: {lock_date.isoformat()}")


@lock_date_group.command("set")
@click.argument("date_str", metavar="DATE")
@click.pass_context
def set_lock_date(ctx, date_str: str):
    """Refuse postings and reversals on or before DATE."""
    db = ctx.obj["db"]

    lock_date = resolve_date(ctx, date_str)
    db.set_lock_date(lock_date)
    click.echo(f"Lock date set to {lock_date.isoformat()}")


@lock_date_group.command("clear")
@click.pass_context
def clear_lock_date(ctx):
    """Remove the lock date."""
    db = ctx.obj["db"]

    db.set_lock_date(None)
    click.echo("Lock date cleared.")


def register_commands(cli):
    """Register lock date commands with main CLI."""
    cli.add_command(lock_date_group, name="lock-date")
