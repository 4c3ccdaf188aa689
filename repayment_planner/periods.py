"""Calendar period segmentation.

A schedule is cut into calendar buckets (months, quarters, half-years or
years). Each bucket is clipped to the schedule window, so the first and last
periods may be shorter than a full calendar bucket.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from .errors import UnknownPeriodType
from .utils import add_months, days_in_year

logger = logging.getLogger(__name__)


class PeriodType(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    HALF_YEAR = "halfYear"
    YEAR = "year"

    @classmethod
    def from_token(cls, token: Union[str, "PeriodType"]) -> "PeriodType":
        """Return the period type for a ``monthly``/``quarterly``/... token."""
        if isinstance(token, PeriodType):
            return token
        try:
            return _TOKENS[token]
        except KeyError:
            raise UnknownPeriodType(token, _TOKENS) from None

    @property
    def months(self) -> int:
        """Calendar step between two consecutive periods."""
        return _MONTHS[self]

    @property
    def periods_in_year(self) -> int:
        return 12 // self.months

    @property
    def token(self) -> str:
        return next(t for t, p in _TOKENS.items() if p is self)


_TOKENS = {
    "monthly": PeriodType.MONTH,
    "quarterly": PeriodType.QUARTER,
    "halfYearly": PeriodType.HALF_YEAR,
    "yearly": PeriodType.YEAR,
}

_MONTHS = {
    PeriodType.MONTH: 1,
    PeriodType.QUARTER: 3,
    PeriodType.HALF_YEAR: 6,
    PeriodType.YEAR: 12,
}


@dataclass(frozen=True)
class Period:
    """One calendar bucket of a schedule, clipped to the schedule window.

    Attributes
    ----------
    name: str
        ``2020M02``, ``2020Q1``, ``2020H2`` or ``2020Y``.
    first_day, last_day: date
        Inclusive bounds, never outside the schedule window.
    length: int
        Number of days from ``first_day`` to ``last_day`` inclusive.
    percent_of_bucket: Decimal
        Share of the full calendar bucket covered by the clipped period.
    percent_of_year: Decimal
        Share of a year represented by one full bucket (1/12, 1/4, 1/2, 1).
    """

    name: str
    first_day: date
    last_day: date
    length: int
    percent_of_bucket: Decimal
    percent_of_year: Decimal

    @property
    def days_in_year(self) -> int:
        return days_in_year(self.first_day.year)

    def covers(self, day: date) -> bool:
        return self.first_day <= day <= self.last_day


def _period_name(period_type: PeriodType, bucket_start: date) -> str:
    year = bucket_start.year
    if period_type is PeriodType.MONTH:
        return f"{year}M{bucket_start.month:02d}"
    if period_type is PeriodType.QUARTER:
        return f"{year}Q{(bucket_start.month - 1) // 3 + 1}"
    if period_type is PeriodType.HALF_YEAR:
        return f"{year}H{(bucket_start.month - 1) // 6 + 1}"
    return f"{year}Y"


def build_period(anchor: date, start: date, end: date, period_type: PeriodType) -> Optional[Period]:
    """Return the clipped period containing ``anchor``.

    Returns ``None`` when the calendar bucket of ``anchor`` has no day inside
    ``[start, end]``; the installment series uses that to stop generating
    periods.
    """
    months = period_type.months
    first_month = (anchor.month - 1) // months * months + 1
    bucket_start = date(anchor.year, first_month, 1)
    bucket_end = add_months(bucket_start, months) - timedelta(days=1)

    first_day = max(bucket_start, start)
    last_day = min(bucket_end, end)
    if first_day > last_day:
        logger.debug("Period for %s is beyond plan (%s > %s)", anchor, first_day, last_day)
        return None

    length = (last_day - first_day).days + 1
    bucket_length = (bucket_end - bucket_start).days + 1
    return Period(
        name=_period_name(period_type, bucket_start),
        first_day=first_day,
        last_day=last_day,
        length=length,
        percent_of_bucket=Decimal(length) / Decimal(bucket_length),
        percent_of_year=Decimal(1) / Decimal(period_type.periods_in_year),
    )
