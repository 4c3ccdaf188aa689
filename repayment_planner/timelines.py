"""Day-granularity timelines: flows, engagement and interest rates.

Both the engagement (outstanding capital) and the interest rate are step
functions of the calendar day. The flow ledger and the rate timeline record
the steps; ``compress_ticks`` samples both for a range of days and collapses
consecutive days with the same (rate, engagement) pair into weighted ticks.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .data_models import FlowEntry, RateEntry, Tick
from .errors import NegativePayment, NegativeRate
from .utils import ONE, ZERO, Number, iter_days, to_decimal

logger = logging.getLogger(__name__)

# Tick weights are kept on a fixed grid so that their sum is exact.
WEIGHT_QUANTUM = Decimal("1e-20")

DayLookup = Callable[[date], Decimal]


class StepTimeline:
    """Right-continuous step function keyed by date.

    The value at a day is the value recorded at the latest key on or before
    that day, or zero before the first key.
    """

    def __init__(self, points: Optional[Mapping[date, Decimal]] = None) -> None:
        items = sorted((points or {}).items())
        self._days: List[date] = [d for d, _ in items]
        self._values: List[Decimal] = [v for _, v in items]

    def value_at(self, day: date) -> Decimal:
        idx = bisect_right(self._days, day)
        if idx == 0:
            return ZERO
        return self._values[idx - 1]

    def items(self) -> List[Tuple[date, Decimal]]:
        return list(zip(self._days, self._values))

    def __len__(self) -> int:
        return len(self._days)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StepTimeline):
            return NotImplemented
        return self.items() == other.items()


class FlowLedger:
    """Payments and repayments of capital, one entry per calendar day."""

    def __init__(self) -> None:
        self._flows: Dict[date, FlowEntry] = {}

    def add_payment(
        self,
        day: date,
        amount: Number,
        is_repayment: bool = False,
        overwrite: bool = False,
    ) -> None:
        """Book a payment (or repayment) on ``day``.

        Parameters
        ----------
        day: date
            Day of the flow.
        amount: Decimal
            Amount of the flow. Zero is ignored.
        is_repayment: bool
            Book the amount as a repayment. Repayments may be negative, which
            corrects an earlier repayment.
        overwrite: bool
            Replace the day's payment and repayment instead of adding to them.
        """
        amount = to_decimal(amount)
        if amount == 0:
            return
        if amount < 0 and not is_repayment:
            raise NegativePayment(day, amount)

        payment, repayment = (ZERO, amount) if is_repayment else (amount, ZERO)
        flow = self._flows.get(day)
        if flow is None:
            flow = FlowEntry(date=day)
            self._flows[day] = flow

        if overwrite:
            flow.payment = payment
            flow.repayment = repayment
        else:
            flow.payment += payment
            flow.repayment += repayment

        self._flows = dict(sorted(self._flows.items()))

    def add_repayment(self, day: date, amount: Number, overwrite: bool = False) -> None:
        self.add_payment(day, amount, is_repayment=True, overwrite=overwrite)

    @property
    def flows(self) -> List[FlowEntry]:
        return list(self._flows.values())

    def repayments_between(self, first: date, last: date) -> Decimal:
        """Sum of repayments booked from ``first`` to ``last`` inclusive."""
        return sum(
            (f.repayment for d, f in self._flows.items() if first <= d <= last),
            ZERO,
        )

    def net_principal(self, until: Optional[date] = None) -> Decimal:
        """Payments minus repayments booked up to ``until`` (all when None)."""
        return sum(
            (f.balance for d, f in self._flows.items() if until is None or d <= until),
            ZERO,
        )

    def engagements(self, scheduled: Optional[Mapping[date, Decimal]] = None) -> StepTimeline:
        """Derive the engagement timeline.

        Every flow changes the running balance from the day after it is
        booked. ``scheduled`` holds capital repaid by the schedule itself,
        keyed by the day it is repaid.
        """
        deltas: Dict[date, Decimal] = {}
        for day, flow in self._flows.items():
            deltas[day] = deltas.get(day, ZERO) + flow.balance
        for day, capital in (scheduled or {}).items():
            deltas[day] = deltas.get(day, ZERO) - capital

        points: Dict[date, Decimal] = {}
        balance = ZERO
        for day in sorted(deltas):
            balance += deltas[day]
            points[day + timedelta(days=1)] = balance
        return StepTimeline(points)


class RateTimeline:
    """Interest rate changes, one entry per calendar day."""

    def __init__(self) -> None:
        self._rates: Dict[date, RateEntry] = {}

    def add_rate(self, day: date, rate: Number) -> None:
        rate = to_decimal(rate)
        if rate < 0:
            raise NegativeRate(day, rate)
        self._rates[day] = RateEntry(date=day, rate=rate)
        self._rates = dict(sorted(self._rates.items()))

    @property
    def entries(self) -> List[RateEntry]:
        return list(self._rates.values())

    def rate_at(self, day: date) -> Decimal:
        rate = ZERO
        for rate_day, entry in self._rates.items():
            if rate_day > day:
                break
            rate = entry.rate
        return rate


def compress_ticks(
    first: date,
    last: date,
    rate_at: DayLookup,
    engagement_at: DayLookup,
) -> List[Tick]:
    """Sample rate and engagement for every day from ``first`` to ``last``.

    Consecutive days with identical (rate, engagement) form one tick weighted
    by its share of the range. Weights sum to exactly one: any residual is
    added to the last tick.
    """
    runs: List[Tuple[date, Tuple[Decimal, Decimal], int]] = []
    for day in iter_days(first, last):
        pair = (rate_at(day), engagement_at(day))
        if runs and runs[-1][1] == pair:
            start, _, days = runs[-1]
            runs[-1] = (start, pair, days + 1)
        else:
            runs.append((day, pair, 1))

    total = Decimal((last - first).days + 1)
    ticks = [
        Tick(
            first_day=start,
            annual_rate=rate,
            engagement=engagement,
            days=days,
            percentage=(Decimal(days) / total).quantize(WEIGHT_QUANTUM),
        )
        for start, (rate, engagement), days in runs
    ]
    if not ticks:
        return ticks

    residual = ONE - sum_weights(ticks)
    if residual:
        logger.debug("Assigning weight residual %s to tick %s", residual, ticks[-1].first_day)
        ticks[-1] = replace(ticks[-1], percentage=ticks[-1].percentage + residual)
    return ticks


def sum_weights(ticks: Iterable[Tick]) -> Decimal:
    return sum((t.percentage for t in ticks), ZERO)
