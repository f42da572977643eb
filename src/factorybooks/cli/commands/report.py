"""Financial report commands."""

import click
from factorybooks.cli.arguments import format_money, resolve_date
from factorybooks.domain.entities import BalanceSheetSection
from factorybooks.domain.reports import ReportService


@click.group()
def report_group():
    """Trial balance and balance sheet."""
    pass


@report_group.command("trial-balance")
@click.option("--as-of", "as_of", help="Include entries up to this date (default: all)")
@click.pass_context
def trial_balance(ctx, as_of: str | None):
    """Show debit and credit totals per account."""
    db = ctx.obj["db"]
    service = ReportService(db)

    report = service.compute_trial_balance(resolve_date(ctx, as_of, "as-of date"))

    title = "Trial Balance"
    if report.as_of_date:
        title += f" as of {report.as_of_date.isoformat()}"
    click.echo(f"\n{title}")
    click.echo("-" * 84)
    click.echo(f"{'Code':6s} | {'Account':32s} | {'Debit':>18s} | {'Credit':>18s}")
    click.echo("-" * 84)
    for line in report.accounts:
        click.echo(
            f"{line.code:6s} | {line.name[:32]:32s} | "
            f"{format_money(line.debit_total):>18s} | {format_money(line.credit_total):>18s}"
        )
    click.echo("-" * 84)
    click.echo(
        f"{'':6s} | {'Total':32s} | "
        f"{format_money(report.total_debits):>18s} | {format_money(report.total_credits):>18s}"
    )

    if report.is_balanced:
        click.echo("\nBalanced.")
    else:
        click.echo(f"\nOUT OF BALANCE by {format_money(report.difference)}", err=True)
        ctx.exit(1)


def _display_section(section: BalanceSheetSection) -> None:
    click.echo(f"\n{section.title}")
    for line in section.lines:
        label = f"{line.code} {line.name}".strip()
        if line.is_contra:
            label += " (contra)"
        click.echo(f"    {label[:44]:44s} {format_money(line.amount):>18s}")
    click.echo(f"  {'Total ' + section.title:46s} {format_money(section.total):>18s}")


@report_group.command("balance-sheet")
@click.option("--as-of", "as_of", help="Include entries up to this date (default: all)")
@click.pass_context
def balance_sheet(ctx, as_of: str | None):
    """Show assets against liabilities and equity, net income included."""
    db = ctx.obj["db"]
    service = ReportService(db)

    sheet = service.build_balance_sheet(resolve_date(ctx, as_of, "as-of date"))

    title = "Balance Sheet"
    if sheet.as_of_date:
        title += f" as of {sheet.as_of_date.isoformat()}"
    click.echo(f"\n{title}")
    click.echo("=" * 66)
    _display_section(sheet.assets)
    _display_section(sheet.liabilities)
    _display_section(sheet.equity)
    click.echo("=" * 66)
    click.echo(f"  {'Total Assets':46s} {format_money(sheet.total_assets):>18s}")
    click.echo(
        f"  {'Total Liabilities and Equity':46s} "
        f"{format_money(sheet.total_liabilities_and_equity):>18s}"
    )

    if sheet.is_balanced:
        click.echo("\nBalanced.")
    else:
        click.echo(f"\nOUT OF BALANCE by {format_money(sheet.difference)}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
