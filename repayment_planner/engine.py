"""Core calculation engine for the repayment planner.

This module implements the ``Schedule``: it owns the flow ledger, the rate
timeline, the schedule window and the installment series, and computes the
interest and capital of every installment. Interest accrues day by day on the
outstanding capital ("engagement") at the rate in force on that day; capital
is assigned by the selected repayment style (manual, linear, balloon or
annuity).

Typical use::

    schedule = Schedule(1000, 0.05, date(2020, 1, 1), date(2020, 12, 31), "monthly")
    schedule.set_first_repayment_date(date(2020, 2, 1))
    schedule.add_rate(date(2020, 6, 1), 0.08)
    schedule.set_repayments_annuity_style()
    schedule.calc()
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Union

from .data_models import FlowEntry, RateEntry, ScheduleConfig, Tick
from .errors import FirstRepaymentExceedesSchedule, StartIsLaterOrEqualToEnd
from .installments import InstallmentSeries
from .periods import Period, PeriodType
from .styles import (
    AnnuityStyle,
    BalloonStyle,
    InstallmentContext,
    LinearStyle,
    ManualStyle,
    RepaymentStyle,
    get_repayment_style,
)
from .timelines import DayLookup, FlowLedger, RateTimeline, StepTimeline, compress_ticks
from .utils import ZERO, Number, round_money

logger = logging.getLogger(__name__)

RATE_QUANTUM = Decimal("1e-12")


def accrue_interest(period: Period, ticks: List[Tick], is_calc_daily: bool) -> Decimal:
    """Return the unrounded interest of ``period`` for the given ticks.

    With daily calculation every tick accrues ``rate * days / days_in_year``;
    otherwise the period accrues its share of a year
    (``percent_of_year * percent_of_bucket``) split between ticks by weight.
    Negative engagement accrues nothing.
    """
    interest = ZERO
    for tick in ticks:
        engagement = max(tick.engagement, ZERO)
        if is_calc_daily:
            interest += engagement * tick.annual_rate * tick.days / period.days_in_year
        else:
            interest += (
                engagement
                * tick.annual_rate
                * period.percent_of_year
                * period.percent_of_bucket
                * tick.percentage
            )
    return interest


def average_rate(ticks: List[Tick]) -> Decimal:
    return sum((t.annual_rate * t.percentage for t in ticks), ZERO).quantize(RATE_QUANTUM)


class Schedule:
    """Repayment schedule of one credit.

    Parameters
    ----------
    amount:
        Capital drawn on ``today``.
    rate:
        Annual interest rate effective from ``today`` (0.05 for 5 %).
    today:
        Reference date. The schedule starts on the following day.
    end:
        Last day of the schedule.
    period_type:
        ``monthly``, ``quarterly``, ``halfYearly`` or ``yearly``.
    """

    def __init__(
        self,
        amount: Number,
        rate: Number,
        today: date,
        end: date,
        period_type: Union[str, PeriodType] = "monthly",
    ) -> None:
        self._start: Optional[date] = None
        self._end: Optional[date] = None
        self._first_repayment_date: Optional[date] = None
        self._is_calc_daily = False
        self._style: RepaymentStyle = ManualStyle()
        self._flows = FlowLedger()
        self._rates = RateTimeline()
        self._engagements = StepTimeline()
        self._period_type = PeriodType.from_token(period_type)
        self._installments: Optional[InstallmentSeries] = None

        self.set_start(today + timedelta(days=1))
        self.set_end(end)
        self.add_payment(today, amount)
        self.add_rate(today, rate)

    # -- window ---------------------------------------------------------

    @property
    def start(self) -> date:
        return self._start

    @property
    def end(self) -> date:
        return self._end

    def set_start(self, start: date) -> None:
        if self._end is not None and start >= self._end:
            raise StartIsLaterOrEqualToEnd(start, self._end)
        self._check_first_repayment_date(start, self._end)
        self._start = start
        self._rebuild_installments()

    def set_end(self, end: date) -> None:
        if self._start is not None and self._start >= end:
            raise StartIsLaterOrEqualToEnd(self._start, end)
        self._check_first_repayment_date(self._start, end)
        self._end = end
        self._rebuild_installments()

    def _check_first_repayment_date(self, start: Optional[date], end: Optional[date]) -> None:
        # The grace boundary must stay inside the window whichever end moves.
        day = self._first_repayment_date
        if day is None:
            return
        if (start is not None and day < start) or (end is not None and day > end):
            raise FirstRepaymentExceedesSchedule(start, end, day)

    @property
    def period_type(self) -> PeriodType:
        return self._period_type

    def set_period_type(self, period_type: Union[str, PeriodType]) -> None:
        self._period_type = PeriodType.from_token(period_type)
        self._rebuild_installments()

    def _rebuild_installments(self) -> None:
        # Nothing to build until the constructor has set both ends.
        if self._start is None or self._end is None:
            return
        self._installments = InstallmentSeries(self._start, self._end, self._period_type)

    @property
    def installments(self) -> InstallmentSeries:
        return self._installments

    @property
    def first_repayment_date(self) -> Optional[date]:
        return self._first_repayment_date

    def set_first_repayment_date(self, first_repayment_date: date) -> None:
        """Set the first day capital may be repaid (end of grace period)."""
        if first_repayment_date < self._start or first_repayment_date > self._end:
            raise FirstRepaymentExceedesSchedule(self._start, self._end, first_repayment_date)
        self._first_repayment_date = first_repayment_date

    @property
    def is_calc_daily(self) -> bool:
        return self._is_calc_daily

    def set_is_calc_daily(self, is_calc_daily: bool) -> None:
        self._is_calc_daily = bool(is_calc_daily)

    # -- repayment styles -------------------------------------------------

    @property
    def repayment_style(self) -> RepaymentStyle:
        return self._style

    def set_repayment_style(self, name: str, **params) -> None:
        self._style = get_repayment_style(name, **params)
        logger.debug("Repayment style set to %s", self._style.describe())

    def set_repayments_manual_style(self) -> None:
        self._style = ManualStyle()

    def set_repayments_linear_style(self) -> None:
        self._style = LinearStyle()

    def set_repayments_balloon_style(self) -> None:
        self._style = BalloonStyle()

    def set_repayments_annuity_style(self, first_capital: Optional[Number] = None) -> None:
        self._style = AnnuityStyle(first_capital)

    # -- flows and rates --------------------------------------------------

    def add_payment(
        self,
        day: date,
        amount: Number,
        is_repayment: bool = False,
        overwrite: bool = False,
    ) -> None:
        """Book a payment of capital (or a repayment) on ``day``.

        See ``FlowLedger.add_payment``.
        """
        self._flows.add_payment(day, amount, is_repayment, overwrite)

    def add_repayment(self, day: date, amount: Number, overwrite: bool = False) -> None:
        self._flows.add_repayment(day, amount, overwrite)

    def add_rate(self, day: date, rate: Number) -> None:
        self._rates.add_rate(day, rate)

    @property
    def flows(self) -> List[FlowEntry]:
        return self._flows.flows

    @property
    def rates(self) -> List[RateEntry]:
        return self._rates.entries

    def get_rate_at(self, day: date) -> Decimal:
        return self._rates.rate_at(day)

    def get_capital_engagement_at(self, day: date) -> Decimal:
        """Outstanding capital on ``day`` as of the last ``calc()``."""
        return self._engagements.value_at(day)

    def get_rates_and_engagements_between(self, first: date, last: date) -> List[Tick]:
        """Rates and engagements from ``first`` to ``last``, one tick per run."""
        return compress_ticks(first, last, self._rates.rate_at, self._engagements.value_at)

    def net_principal(self) -> Decimal:
        """Payments minus repayments booked up to the end of the schedule."""
        return self._flows.net_principal(until=self._end)

    # -- calculation ------------------------------------------------------

    def _eligible_counts(self) -> List[int]:
        """Eligible installments left at each position (0 in grace period)."""
        eligible = [
            self._first_repayment_date is None or i.last_day >= self._first_repayment_date
            for i in self._installments
        ]
        counts: List[int] = []
        left = sum(eligible)
        for flag in eligible:
            counts.append(left if flag else 0)
            if flag:
                left -= 1
        return counts

    def calc(self) -> "Schedule":
        """Calculate interest and capital of every installment.

        Installments are settled in order: capital scheduled in one
        installment lowers the engagement from the first day of the next.
        Calling ``calc`` again recomputes everything from the flows and
        rates.
        """
        style = self._style
        acc = style.new_accumulator()
        flows_timeline = self._flows.engagements()
        scheduled: Dict[date, Decimal] = {}
        scheduled_total = ZERO

        logger.debug(
            "Calculating %d installments (%s, daily=%s)",
            len(self._installments), style.describe(), self._is_calc_daily,
        )

        for installment, remaining_eligible in zip(self._installments, self._eligible_counts()):
            period = installment.period
            engagement_at = _shifted(flows_timeline, scheduled_total)
            ticks = compress_ticks(period.first_day, period.last_day, self._rates.rate_at, engagement_at)
            interest = round_money(accrue_interest(period, ticks, self._is_calc_daily))

            ctx = InstallmentContext(
                installment=installment,
                interest=interest,
                remaining=engagement_at(period.last_day + timedelta(days=1)),
                remaining_eligible=remaining_eligible,
                average_rate=average_rate(ticks),
                registered_repayment=self._flows.repayments_between(period.first_day, period.last_day),
            )
            capital = style.capital(ctx, acc)
            installment._settle(interest, capital)

            if style.schedules_capital and capital:
                scheduled[period.last_day] = capital
                scheduled_total += capital

        self._engagements = self._flows.engagements(scheduled)
        return self

    def summary(self) -> Dict[str, object]:
        """Aggregate figures of the last calculation."""
        installments = self._installments
        return {
            "first_day": self._start.isoformat(),
            "last_day": self._end.isoformat(),
            "grace_till": self._first_repayment_date.isoformat() if self._first_repayment_date else None,
            "repayments_style": self._style.describe(),
            "daily_calcs": self._is_calc_daily,
            "period_type": self._period_type.value,
            "installments": len(installments),
            "net_principal": float(self.net_principal()),
            "total_interest": float(installments.sum_of_interests),
            "total_capital": float(installments.sum_of_capital),
            "total_payment": float(installments.sum_of_totals),
        }


def _shifted(timeline: StepTimeline, scheduled_total: Decimal) -> DayLookup:
    """Engagement lookup net of the capital scheduled so far."""

    def engagement_at(day: date) -> Decimal:
        return timeline.value_at(day) - scheduled_total

    return engagement_at


def build_schedule(config: ScheduleConfig) -> Schedule:
    """Build and calculate a schedule from a ``ScheduleConfig``."""
    schedule = Schedule(config.principal, config.rate, config.today, config.end, config.period_type)
    if config.first_repayment_date is not None:
        schedule.set_first_repayment_date(config.first_repayment_date)
    schedule.set_is_calc_daily(config.is_calc_daily)
    for flow in config.flows:
        schedule.add_payment(flow.date, flow.payment)
        schedule.add_repayment(flow.date, flow.repayment)
    for entry in config.rates:
        schedule.add_rate(entry.date, entry.rate)

    params = {}
    if config.repayment_style == "annuity" and config.first_capital is not None:
        params["first_capital"] = config.first_capital
    schedule.set_repayment_style(config.repayment_style, **params)
    return schedule.calc()
