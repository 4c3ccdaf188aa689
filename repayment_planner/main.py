"""Command-line interface for the repayment planner.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full repayment schedules, view summaries or
inspect the rates and engagements in force over a range of days. Results can
be printed to the terminal or exported to text, CSV or JSON files.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import click

from .data_models import FlowEntry, RateEntry, ScheduleConfig
from .engine import Schedule, build_schedule
from .errors import RepaymentPlannerError
from .formatter import (
    export_to_csv,
    export_to_json,
    export_to_text,
    format_schedule,
    print_summary,
    print_ticks,
)
from .styles import available_styles
from .utils import decimal_from_str, parse_date


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000).
    """
    value = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string ("5", "5%" or "4.5") into a fraction."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        return decimal_from_str(value) / Decimal(100)
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def parse_day(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _split_dated(item: str, what: str) -> Tuple[date, str]:
    parts = item.split(":")
    if len(parts) != 2:
        raise click.BadParameter(f"{what} must be in YYYY-MM-DD:VALUE format; got {item}")
    return parse_day(parts[0]), parts[1]


def parse_flow_strings(payments: Tuple[str, ...], repayments: Tuple[str, ...]) -> List[FlowEntry]:
    flows: List[FlowEntry] = []
    for item in payments:
        day, amount = _split_dated(item, "Payment")
        flows.append(FlowEntry(date=day, payment=parse_amount(amount)))
    for item in repayments:
        day, amount = _split_dated(item, "Repayment")
        flows.append(FlowEntry(date=day, repayment=parse_amount(amount)))
    return flows


def parse_rate_strings(values: Tuple[str, ...]) -> List[RateEntry]:
    rates: List[RateEntry] = []
    for item in values:
        day, percent = _split_dated(item, "Rate change")
        rates.append(RateEntry(date=day, rate=parse_percent(percent)))
    return rates


def build_config_from_options(
    amount: str,
    rate: str,
    today: str,
    end: str,
    period: str = "monthly",
    style: str = "manual",
    first_capital: Optional[str] = None,
    first_repayment: Optional[str] = None,
    daily: bool = False,
    payment: Tuple[str, ...] = (),
    repayment: Tuple[str, ...] = (),
    rate_change: Tuple[str, ...] = (),
) -> ScheduleConfig:
    return ScheduleConfig(
        principal=parse_amount(amount),
        rate=parse_percent(rate),
        today=parse_day(today),
        end=parse_day(end),
        period_type=period,
        repayment_style=style.lower(),
        first_capital=parse_amount(first_capital) if first_capital else None,
        first_repayment_date=parse_day(first_repayment) if first_repayment else None,
        is_calc_daily=daily,
        flows=parse_flow_strings(payment, repayment),
        rates=parse_rate_strings(rate_change),
    )


def _run(config: ScheduleConfig) -> Schedule:
    try:
        return build_schedule(config)
    except RepaymentPlannerError as exc:
        raise click.ClickException(str(exc))


def schedule_options(func: Callable) -> Callable:
    """Attach the options shared by every command that builds a schedule."""
    options = [
        click.option("--amount", "-a", "amount", required=True, help="Capital drawn on the reference date"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--today", "-t", "today", required=True, help="Reference date (YYYY-MM-DD); schedule starts the day after"),
        click.option("--end", "-e", "end", required=True, help="Last day of the schedule (YYYY-MM-DD)"),
        click.option(
            "--period",
            "period",
            type=click.Choice(["monthly", "quarterly", "halfYearly", "yearly"]),
            default="monthly",
            help="Installment period",
        ),
        click.option(
            "--style",
            "style",
            type=click.Choice(sorted(available_styles())),
            default="manual",
            help="Repayment style",
        ),
        click.option("--first-capital", "first_capital", help="Annuity only: capital of the first repaying installment"),
        click.option("--first-repayment", "first_repayment", help="First repayment date (YYYY-MM-DD), ends the grace period"),
        click.option("--daily", "daily", is_flag=True, default=False, help="Accrue interest on actual days in year"),
        click.option("--payment", "payment", multiple=True, help="Extra draw in YYYY-MM-DD:AMOUNT format"),
        click.option("--repayment", "repayment", multiple=True, help="Repayment in YYYY-MM-DD:AMOUNT format"),
        click.option("--rate-change", "rate_change", multiple=True, help="Rate change in YYYY-MM-DD:PERCENT format"),
        click.option("--verbose", "-v", "verbose", is_flag=True, default=False, help="Log calculation details"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """A command-line credit repayment planner."""
    pass


@cli.command()
@schedule_options
@click.option("--output", "output", type=str, help="Output file path (.txt, .csv or .json)")
def schedule(output: Optional[str], verbose: bool, **options) -> None:
    """Compute and print the full repayment schedule."""
    _configure_logging(verbose)
    result = _run(build_config_from_options(**options))
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, result)
        elif suffix == ".csv":
            export_to_csv(path, result)
        elif suffix == ".txt":
            export_to_text(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .txt, .csv or .json")
        click.echo(f"Schedule exported to {path}")
    else:
        click.echo(format_schedule(result), nl=False)


@cli.command()
@schedule_options
def summary(verbose: bool, **options) -> None:
    """Compute and print only the summary metrics for a schedule."""
    _configure_logging(verbose)
    result = _run(build_config_from_options(**options))
    print_summary(result.summary())


@cli.command()
@schedule_options
@click.option("--from", "first", required=True, help="First day of the report (YYYY-MM-DD)")
@click.option("--to", "last", required=True, help="Last day of the report (YYYY-MM-DD)")
def rates(first: str, last: str, verbose: bool, **options) -> None:
    """Print the rates and engagements in force between two days."""
    _configure_logging(verbose)
    first_day, last_day = parse_day(first), parse_day(last)
    if first_day > last_day:
        raise click.BadParameter("--from must not be later than --to")
    result = _run(build_config_from_options(**options))
    print_ticks(result.get_rates_and_engagements_between(first_day, last_day))


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


if __name__ == "__main__":
    cli()
