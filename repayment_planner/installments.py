"""Ordered collection of installments covering a schedule window."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterator, List, Union

from .data_models import Installment
from .errors import InstallmentDonoex
from .periods import PeriodType, build_period
from .utils import ZERO, add_months

logger = logging.getLogger(__name__)


class InstallmentSeries:
    """Gapless sequence of installments from ``start`` to ``end``.

    The first period is built around ``start``; the anchor then moves forward
    one period-type step at a time until the next bucket falls outside the
    window. Installments are numbered from 1 and can also be looked up by
    period name (``2020M02``).
    """

    def __init__(self, start: date, end: date, period_type: PeriodType) -> None:
        self._installments: List[Installment] = []
        self._by_name: Dict[str, Installment] = {}

        step = 0
        while True:
            anchor = add_months(start, step * period_type.months)
            period = build_period(anchor, start, end, period_type)
            if period is None:
                break
            installment = Installment(order=len(self._installments) + 1, period=period)
            self._installments.append(installment)
            self._by_name[period.name] = installment
            step += 1

        logger.debug(
            "Built %d %s installments for %s..%s",
            len(self._installments), period_type.value, start, end,
        )

    def __iter__(self) -> Iterator[Installment]:
        return iter(self._installments)

    def __len__(self) -> int:
        return len(self._installments)

    def __getitem__(self, key: Union[int, str]) -> Installment:
        """Index by position (0-based) or by period name."""
        if isinstance(key, str):
            return self._by_name[key]
        return self._installments[key]

    def all(self) -> List[Installment]:
        return list(self._installments)

    def names(self) -> List[str]:
        return [i.name for i in self._installments]

    def get_installment_for_date(self, day: date) -> Installment:
        for installment in self._installments:
            if installment.period.covers(day):
                return installment
        raise InstallmentDonoex(day)

    @property
    def sum_of_interests(self) -> Decimal:
        return sum((i.interest for i in self._installments), ZERO)

    @property
    def sum_of_capital(self) -> Decimal:
        return sum((i.capital for i in self._installments), ZERO)

    @property
    def sum_of_totals(self) -> Decimal:
        return sum((i.total for i in self._installments), ZERO)
