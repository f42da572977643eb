"""Depreciation commands."""

from datetime import date

import click
from factorybooks.cli.arguments import format_money, resolve_amount, resolve_date
from factorybooks.cli.error_handling import handle_domain_error
from factorybooks.domain.depreciation import DepreciationScheduler
from factorybooks.domain.errors import DomainError


@click.group()
def depreciation_group():
    """Manage fixed assets and run monthly depreciation."""
    pass


@depreciation_group.command("add-asset")
@click.argument("name", metavar="NAME")
@click.argument("cost", metavar="COST")
@click.option("--life", "useful_life_months", type=int, required=True, help="Useful life in months")
@click.option("--salvage", default="0", help="Salvage value (default: 0)")
@click.option("--purchase-date", help="Purchase date (default: today)")
@click.option("--monthly", help="Override the straight-line monthly charge")
@click.pass_context
def add_asset(
    ctx,
    name: str,
    cost: str,
    useful_life_months: int,
    salvage: str,
    purchase_date: str | None,
    monthly: str | None,
):
    """Register a fixed asset.

    Examples:
        factorybooks depreciation add-asset "Lathe" 12000 --life 12 --purchase-date 2024-01-01
    """
    db = ctx.obj["db"]
    scheduler = DepreciationScheduler(db)

    try:
        asset = scheduler.add_asset(
            name=name,
            purchase_date=resolve_date(ctx, purchase_date, "purchase date") or date.today(),
            purchase_cost=resolve_amount(ctx, cost),
            useful_life_months=useful_life_months,
            salvage_value=resolve_amount(ctx, salvage),
            monthly_depreciation=resolve_amount(ctx, monthly) if monthly else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Added asset '{asset.name}' (ID: {asset.id}), "
        f"monthly depreciation {format_money(asset.monthly_depreciation)}"
    )


@depreciation_group.command("assets")
@click.pass_context
def list_assets(ctx):
    """List fixed assets."""
    db = ctx.obj["db"]

    assets = db.list_fixed_assets()
    if not assets:
        click.echo("No fixed assets found.")
        return

    click.echo("\nFixed assets:")
    click.echo("-" * 96)
    for asset in assets:
        click.echo(
            f"{asset.name[:24]:24s} | {asset.purchase_date.isoformat()} | "
            f"cost {format_money(asset.purchase_cost):>14s} | "
            f"accumulated {format_money(asset.accumulated_depreciation):>14s} | "
            f"book {format_money(asset.book_value):>14s} | {asset.status.value}"
        )


@depreciation_group.command("pending")
@click.pass_context
def pending(ctx):
    """List months that still need depreciation."""
    db = ctx.obj["db"]
    scheduler = DepreciationScheduler(db)

    periods = scheduler.get_pending_periods()
    if not periods:
        click.echo("No pending periods.")
        return
    click.echo(f"Pending periods ({len(periods)}):")
    for label in periods:
        click.echo(f"  {label}")


@depreciation_group.command("run-period")
@click.argument("period", metavar="YYYY-MM")
@click.pass_context
def run_period(ctx, period: str):
    """Depreciate all active assets for one closed month."""
    db = ctx.obj["db"]
    scheduler = DepreciationScheduler(db)

    result = scheduler.run_for_period(period)
    if result.already_processed:
        click.echo(f"Period {result.period_label} has already been processed.")
        return
    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        ctx.exit(1)
    click.echo(
        f"Processed {result.period_label}: {result.assets_count} assets, "
        f"total {format_money(result.total_depreciation)}"
    )


@depreciation_group.command("run-all")
@click.pass_context
def run_all(ctx):
    """Process every pending month in order, stopping at the first failure."""
    db = ctx.obj["db"]
    scheduler = DepreciationScheduler(db)

    result = scheduler.run_all_pending()
    if not result.processed_periods and not result.skipped_periods and result.success:
        click.echo("No pending periods.")
        return
    for label in result.processed_periods:
        click.echo(f"Processed {label}")
    for label in result.skipped_periods:
        click.echo(f"Skipped {label}: processed by another run")
    click.echo(f"Total depreciation: {format_money(result.total_depreciation)}")
    if not result.success:
        click.echo(f"Error: stopped at {result.failed_at}: {'; '.join(result.errors)}", err=True)
        ctx.exit(1)


@depreciation_group.command("status")
@click.pass_context
def status(ctx):
    """Show pending work and the estimated charge."""
    db = ctx.obj["db"]
    scheduler = DepreciationScheduler(db)

    result = scheduler.get_depreciation_status()
    click.echo(f"Pending periods:   {result.pending_count}")
    click.echo(f"Oldest pending:    {result.oldest_pending or '-'}")
    click.echo(f"Last processed:    {result.last_processed or '-'}")
    click.echo(f"Estimated total:   {format_money(result.estimated_total)}")


def register_commands(cli):
    """Register depreciation commands with main CLI."""
    cli.add_command(depreciation_group, name="depreciation")
