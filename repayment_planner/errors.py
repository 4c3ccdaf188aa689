"""Exceptions raised by the repayment planner.

Every error is a ``ValueError`` subclass raised at the point where invalid
input is given. The offending values are kept as attributes so callers can
report them without parsing the message.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Tuple


class RepaymentPlannerError(ValueError):
    """Base class for invalid schedule input."""


class NegativeRate(RepaymentPlannerError):
    """Interest rate below zero."""

    def __init__(self, day: date, rate: Decimal) -> None:
        self.day = day
        self.rate = rate
        super().__init__(f"Rate must not be negative; got {rate} at {day.isoformat()}")


class NegativePayment(RepaymentPlannerError):
    """Payment of capital below zero (repayments may be negative)."""

    def __init__(self, day: date, amount: Decimal) -> None:
        self.day = day
        self.amount = amount
        super().__init__(f"Payment must not be negative; got {amount} at {day.isoformat()}")


class StartIsLaterOrEqualToEnd(RepaymentPlannerError):
    def __init__(self, start: date, end: date) -> None:
        self.start = start
        self.end = end
        super().__init__(
            f"Schedule start {start.isoformat()} must be earlier than end {end.isoformat()}"
        )


class FirstRepaymentExceedesSchedule(RepaymentPlannerError):
    """First repayment is before or after the schedule."""

    def __init__(self, start: date, end: date, first_repayment_date: date) -> None:
        self.start = start
        self.end = end
        self.first_repayment_date = first_repayment_date
        super().__init__(
            f"First repayment date {first_repayment_date.isoformat()} is outside "
            f"schedule {start.isoformat()}..{end.isoformat()}"
        )


class UnknownPeriodType(RepaymentPlannerError):
    def __init__(self, token: str, allowed: Iterable[str]) -> None:
        self.token = token
        self.allowed: Tuple[str, ...] = tuple(allowed)
        super().__init__(
            f"Unknown period type {token!r}; use one of: {', '.join(self.allowed)}"
        )


class UnknownRepaymentStyle(RepaymentPlannerError):
    def __init__(self, name: str, allowed: Iterable[str]) -> None:
        self.name = name
        self.allowed: Tuple[str, ...] = tuple(allowed)
        super().__init__(
            f"Unknown repayment style {name!r}; use one of: {', '.join(self.allowed)}"
        )


class InstallmentDonoex(RepaymentPlannerError):
    """No installment covers the given date."""

    def __init__(self, day: date) -> None:
        self.day = day
        super().__init__(f"No installment covers {day.isoformat()}")
