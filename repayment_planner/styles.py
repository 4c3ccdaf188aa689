"""Repayment styles: how much capital each installment repays.

A style is consulted once per installment, in installment order, during a
schedule calculation. It receives an ``InstallmentContext`` describing the
installment (its interest, the capital still outstanding, how many eligible
installments are left) and an accumulator created by ``new_accumulator`` at
the start of the calculation. Styles that carry state between installments
(linear, annuity) keep it in that accumulator, never on the style itself, so
repeated calculations always start from scratch.

Styles
------
manual
    Capital is whatever the borrower repaid inside the period, as booked in
    the flow ledger. Nothing is scheduled.
linear
    Equal capital in every eligible installment, rounded down to cents; the
    remainder goes to the last installment.
balloon
    No capital until the last installment, which repays everything.
annuity
    Level total payment (interest + capital). The payment for ``k`` remaining
    installments of balance ``B`` at period rate ``q`` is::

        A = B * q / (1 - (1 + q) ** -k)

    and the capital is ``A - interest``. Rounding differences are carried to
    the next installment (``global_diff``). An optional ``first_capital``
    replaces the capital of the first eligible installment; what the formula
    would have repaid there is kept in ``first_capital_possible`` until the
    level payment is fixed on the remaining balance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Optional

from .data_models import Installment
from .errors import UnknownRepaymentStyle
from .utils import ZERO, Number, floor_money, round_money, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallmentContext:
    """What a repayment style knows about the installment being settled.

    Attributes
    ----------
    installment: Installment
        The installment, with its period.
    interest: Decimal
        Interest of the installment, already rounded to cents.
    remaining: Decimal
        Capital outstanding at the end of the period: every flow booked up
        to the period's last day minus the capital scheduled in earlier
        installments.
    remaining_eligible: int
        Eligible installments from this one to the end of the schedule,
        this one included. Zero during the grace period.
    average_rate: Decimal
        Annual rate averaged over the period's days.
    registered_repayment: Decimal
        Repayments booked in the flow ledger inside the period.
    """

    installment: Installment
    interest: Decimal
    remaining: Decimal
    remaining_eligible: int
    average_rate: Decimal
    registered_repayment: Decimal

    @property
    def is_eligible(self) -> bool:
        return self.remaining_eligible > 0

    @property
    def is_last_eligible(self) -> bool:
        return self.remaining_eligible == 1


class RepaymentStyle:
    """Base class for repayment styles."""

    name = "base"
    #: Whether capital returned by ``capital`` is repaid by the schedule
    #: itself (and so lowers the engagement from the next day).
    schedules_capital = True

    def new_accumulator(self) -> Optional[object]:
        return None

    def capital(self, ctx: InstallmentContext, acc) -> Decimal:
        raise NotImplementedError

    def describe(self) -> str:
        return self.name


class ManualStyle(RepaymentStyle):
    name = "manual"
    schedules_capital = False

    def capital(self, ctx: InstallmentContext, acc) -> Decimal:
        return ctx.registered_repayment


class BalloonStyle(RepaymentStyle):
    name = "balloon"

    def capital(self, ctx: InstallmentContext, acc) -> Decimal:
        if ctx.is_last_eligible:
            return ctx.remaining
        return ZERO


@dataclass
class LinearAccumulator:
    base: Optional[Decimal] = None
    expected_remaining: Optional[Decimal] = None


class LinearStyle(RepaymentStyle):
    name = "linear"

    def new_accumulator(self) -> LinearAccumulator:
        return LinearAccumulator()

    def capital(self, ctx: InstallmentContext, acc: LinearAccumulator) -> Decimal:
        if not ctx.is_eligible:
            return ZERO
        if ctx.is_last_eligible:
            return ctx.remaining

        # A flow outside the schedule moved the balance: spread it again.
        if acc.base is None or ctx.remaining != acc.expected_remaining:
            acc.base = floor_money(ctx.remaining / ctx.remaining_eligible)
            logger.debug(
                "Linear base fixed at %s for %d installments from %s",
                acc.base, ctx.remaining_eligible, ctx.installment.name,
            )

        capital = min(max(acc.base, ZERO), max(ctx.remaining, ZERO))
        acc.expected_remaining = ctx.remaining - capital
        return capital


@dataclass
class AnnuityAccumulator:
    level_payment: Optional[Decimal] = None
    level_rate: Optional[Decimal] = None
    expected_remaining: Optional[Decimal] = None
    global_diff: Decimal = ZERO
    first_capital_possible: Decimal = ZERO
    started: bool = False

    def clear_first_capital_possible(self) -> Decimal:
        result = self.first_capital_possible
        self.first_capital_possible = ZERO
        return result


def annuity_payment(balance: Decimal, rate: Decimal, periods: int) -> Decimal:
    """Return the level payment repaying ``balance`` in ``periods`` payments.

    When the period rate is zero the payment simplifies to
    ``balance / periods``.
    """
    if periods <= 0:
        raise ValueError("Number of periods must be positive")
    if rate == 0:
        return balance / Decimal(periods)
    factor = (1 + rate) ** periods
    return balance * (rate * factor) / (factor - 1)


class AnnuityStyle(RepaymentStyle):
    name = "annuity"

    def __init__(self, first_capital: Optional[Number] = None) -> None:
        self.first_capital = None if first_capital is None else to_decimal(first_capital)

    def new_accumulator(self) -> AnnuityAccumulator:
        return AnnuityAccumulator()

    def describe(self) -> str:
        if self.first_capital is None:
            return self.name
        return f"{self.name} (first capital {self.first_capital})"

    def capital(self, ctx: InstallmentContext, acc: AnnuityAccumulator) -> Decimal:
        if not ctx.is_eligible:
            return ZERO
        if ctx.is_last_eligible:
            return ctx.remaining

        period_rate = ctx.average_rate * ctx.installment.period.percent_of_year
        remaining = max(ctx.remaining, ZERO)

        if not acc.started and self.first_capital is not None:
            acc.started = True
            possible = annuity_payment(remaining, period_rate, ctx.remaining_eligible) - ctx.interest
            acc.first_capital_possible += possible
            capital = min(max(round_money(self.first_capital), ZERO), remaining)
            acc.expected_remaining = ctx.remaining - capital
            return capital
        acc.started = True

        if (
            acc.level_payment is None
            or period_rate != acc.level_rate
            or ctx.remaining != acc.expected_remaining
        ):
            acc.level_payment = annuity_payment(remaining, period_rate, ctx.remaining_eligible)
            acc.level_rate = period_rate
            acc.global_diff = ZERO
            possible = acc.clear_first_capital_possible()
            logger.debug(
                "Annuity level fixed at %s from %s (%d installments, first capital possible %s)",
                acc.level_payment, ctx.installment.name, ctx.remaining_eligible, possible,
            )

        ideal = acc.level_payment - ctx.interest + acc.global_diff
        capital = min(max(round_money(ideal), ZERO), remaining)
        acc.global_diff = ideal - capital
        acc.expected_remaining = ctx.remaining - capital
        return capital


_REGISTRY: Dict[str, Callable[..., RepaymentStyle]] = {
    "manual": ManualStyle,
    "linear": LinearStyle,
    "balloon": BalloonStyle,
    "annuity": AnnuityStyle,
}


def get_repayment_style(name: str, **params) -> RepaymentStyle:
    """Return a repayment style instance by name."""
    try:
        factory = _REGISTRY[name.lower()]
    except KeyError:
        raise UnknownRepaymentStyle(name, _REGISTRY) from None
    return factory(**params)


def available_styles() -> Dict[str, Callable[..., RepaymentStyle]]:
    return dict(_REGISTRY)
