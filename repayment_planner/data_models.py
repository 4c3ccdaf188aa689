"""Data models for the repayment planner.

This module defines dataclasses representing the different entities used by
the planner: flows (payments and repayments of capital), interest rate
entries, rate/engagement ticks, installments and the overall schedule
configuration. Using dataclasses makes it easy to construct, inspect and
serialize these structures.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from .periods import Period

_ZERO = Decimal("0")


@dataclass
class FlowEntry:
    """Capital movements booked on one calendar day.

    Attributes
    ----------
    date: date
        Day of the flow. Engagement changes on the following day.
    payment: Decimal
        Capital drawn by the borrower (never negative).
    repayment: Decimal
        Capital returned by the borrower. A negative repayment is a
        correction of an earlier one.
    """

    date: date
    payment: Decimal = _ZERO
    repayment: Decimal = _ZERO

    @property
    def balance(self) -> Decimal:
        return self.payment - self.repayment


@dataclass(frozen=True)
class RateEntry:
    """Annual interest rate (0.05 for 5 %) effective from ``date``."""

    date: date
    rate: Decimal


@dataclass(frozen=True)
class Tick:
    """A run of consecutive days sharing the same rate and engagement.

    ``percentage`` is the share of the sampled range covered by the run; the
    percentages of one range always sum to exactly one.
    """

    first_day: date
    annual_rate: Decimal
    engagement: Decimal
    days: int
    percentage: Decimal


@dataclass
class Installment:
    """One period of the schedule.

    Installments are created and owned by the installment series. Interest and
    capital are zero until the schedule is calculated and read-only to
    everything but the calculation.
    """

    order: int
    period: Period
    _interest: Decimal = field(default=_ZERO, init=False)
    _capital: Decimal = field(default=_ZERO, init=False)

    @property
    def interest(self) -> Decimal:
        return self._interest

    @property
    def capital(self) -> Decimal:
        return self._capital

    @property
    def total(self) -> Decimal:
        return self._interest + self._capital

    @property
    def name(self) -> str:
        return self.period.name

    @property
    def first_day(self) -> date:
        return self.period.first_day

    @property
    def last_day(self) -> date:
        return self.period.last_day

    @property
    def length(self) -> int:
        return self.period.length

    def _settle(self, interest: Decimal, capital: Decimal) -> None:
        self._interest = interest
        self._capital = capital


@dataclass
class ScheduleConfig:
    """Configuration of a repayment schedule.

    This configuration collects all user inputs into a single object, making
    it easy to pass around and serialize. ``today`` is the reference date: the
    initial draw and rate are booked on it and the schedule starts on the next
    day.
    """

    principal: Decimal
    rate: Decimal  # annual rate as a fraction, 0.05 for 5 %
    today: date
    end: date
    period_type: str = "monthly"
    repayment_style: str = "manual"
    first_capital: Optional[Decimal] = None  # annuity override for the first eligible installment
    first_repayment_date: Optional[date] = None
    is_calc_daily: bool = False
    flows: List[FlowEntry] = field(default_factory=list)
    rates: List[RateEntry] = field(default_factory=list)
