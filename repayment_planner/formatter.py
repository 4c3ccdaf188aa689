"""Output helpers for the repayment planner.

This module renders a calculated ``Schedule`` as a fixed-width text table, as
CSV and as JSON, and prints summaries and rate/engagement reports. It relies
only on built-in string formatting.
"""

from __future__ import annotations

import csv
import io
import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .data_models import Installment, Tick
from .engine import Schedule

CSV_HEADER = ["number", "period", "start", "stop", "length", "interests", "capital", "whole"]

_RULE = "|-----|---------|------------|------------|------|---------------|---------------|---------------|"
_HEAD = "| no  | period  | start      |     end    | days |   interests   |    capital    |     whole     |"


def _money(value: Decimal, width: int = 13) -> str:
    return f"{value:,.2f}".rjust(width)


def _installment_row(installment: Installment) -> str:
    return (
        f"| {installment.order:>3} "
        f"| {installment.name:<7} "
        f"| {installment.first_day.isoformat()} "
        f"| {installment.last_day.isoformat()} "
        f"| {installment.length:>4} "
        f"| {_money(installment.interest)} "
        f"| {_money(installment.capital)} "
        f"| {_money(installment.total)} |"
    )


def format_schedule(schedule: Schedule) -> str:
    """Return the schedule as a text report.

    The report lists the settings, the payments and interest rates booked,
    the installment table and the sums of capital and interest.
    """
    grace = schedule.first_repayment_date.isoformat() if schedule.first_repayment_date else "-"
    lines: List[str] = [
        "Settings:",
        f"  - first day:   {schedule.start.isoformat()}",
        f"  - grace till:  {grace}",
        f"  - last day:    {schedule.end.isoformat()}",
        f"  - repayments:  {schedule.repayment_style.describe()}",
        f"  - daily calcs: {'yes' if schedule.is_calc_daily else 'no'}",
        f"  - period type: {schedule.period_type.value}",
        "",
        "Payments:",
    ]
    for flow in schedule.flows:
        # Repayment-only days are not payments.
        if flow.payment == 0:
            continue
        lines.append(f"  - {flow.date.isoformat()}: {_money(flow.payment)}")

    lines += ["", "Interests rates:"]
    for entry in schedule.rates:
        lines.append(f"  - {entry.date.isoformat()}: {entry.rate * 100:>5.2f}%")

    lines += ["", _RULE, _HEAD, _RULE]
    lines += [_installment_row(i) for i in schedule.installments]
    lines += [
        _RULE,
        "",
        "Sum of:",
        f"  - capital:   {_money(schedule.installments.sum_of_capital)}",
        f"  - interests: {_money(schedule.installments.sum_of_interests)}",
    ]
    return "\n".join(lines) + "\n"


def format_csv(schedule: Schedule) -> str:
    """Return the installments as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for i in schedule.installments:
        writer.writerow(
            [
                i.order,
                i.name,
                i.first_day.isoformat(),
                i.last_day.isoformat(),
                i.length,
                f"{i.interest:.2f}",
                f"{i.capital:.2f}",
                f"{i.total:.2f}",
            ]
        )
    return buffer.getvalue()


def schedule_to_dict(schedule: Schedule) -> Dict[str, Any]:
    """Convert the schedule into a JSON-serialisable dictionary."""
    rows = []
    for i in schedule.installments:
        rows.append(
            {
                "number": i.order,
                "period": i.name,
                "start": i.first_day.isoformat(),
                "stop": i.last_day.isoformat(),
                "length": i.length,
                "interests": float(i.interest),
                "capital": float(i.capital),
                "whole": float(i.total),
            }
        )
    return {"summary": schedule.summary(), "schedule": rows}


def export_to_text(path: Path, schedule: Schedule) -> None:
    path.write_text(format_schedule(schedule), encoding="utf-8")


def export_to_csv(path: Path, schedule: Schedule) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(format_csv(schedule))


def export_to_json(path: Path, schedule: Schedule) -> None:
    """Export schedule and summary to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(schedule_to_dict(schedule), f, indent=2)


def print_summary(summary: Dict[str, object]) -> None:
    """Print a summary of schedule metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"First day          : {summary['first_day']}")
    print(f"Last day           : {summary['last_day']}")
    if summary.get("grace_till"):
        print(f"Grace till         : {summary['grace_till']}")
    print(f"Repayments         : {summary['repayments_style']}")
    print(f"Installments       : {summary['installments']}")
    print(f"Net principal      : {summary['net_principal']:.2f}")
    print(f"Total capital      : {summary['total_capital']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total payment      : {summary['total_payment']:.2f}")
    print("-" * 72)


def print_ticks(ticks: Iterable[Tick]) -> None:
    """Print rate/engagement ticks as a simple table."""
    print("\t".join(["From", "Days", "Rate", "Engagement", "Weight"]))
    for tick in ticks:
        print(
            "\t".join(
                [
                    tick.first_day.isoformat(),
                    str(tick.days),
                    f"{tick.annual_rate * 100:.2f}%",
                    f"{tick.engagement:.2f}",
                    f"{tick.percentage:.6f}",
                ]
            )
        )
