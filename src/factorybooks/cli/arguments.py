"""Parsing helpers for CLI date and amount arguments."""

from datetime import date
from decimal import Decimal

import click

from factorybooks.utils.amount_parser import parse_amount
from factorybooks.utils.date_parser import parse_date


def resolve_date(ctx: click.Context, value: str | None, label: str = "date") -> date | None:
    """Parse an optional date argument, exiting with an error if invalid."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_amount(ctx: click.Context, value: str) -> Decimal:
    """Parse an amount argument, exiting with an error if invalid."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)


def format_money(amount: Decimal) -> str:
    return f"{amount:,.2f}"
