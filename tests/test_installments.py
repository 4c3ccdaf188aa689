from datetime import date, timedelta

import pytest

from repayment_planner.errors import InstallmentDonoex
from repayment_planner.installments import InstallmentSeries
from repayment_planner.periods import PeriodType


def _assert_gapless(series: InstallmentSeries, start: date, end: date) -> None:
    items = series.all()
    assert items[0].first_day == start
    assert items[-1].last_day == end
    for previous, current in zip(items, items[1:]):
        assert previous.last_day + timedelta(days=1) == current.first_day
    assert [i.order for i in items] == list(range(1, len(items) + 1))


def test_monthly_series_covers_a_year() -> None:
    series = InstallmentSeries(date(2020, 1, 1), date(2020, 12, 31), PeriodType.MONTH)

    assert len(series) == 12
    assert series.names() == [f"2020M{m:02d}" for m in range(1, 13)]
    _assert_gapless(series, date(2020, 1, 1), date(2020, 12, 31))


def test_quarterly_series_over_two_years() -> None:
    series = InstallmentSeries(date(2020, 1, 2), date(2021, 12, 31), PeriodType.QUARTER)

    assert series.names() == [
        "2020Q1", "2020Q2", "2020Q3", "2020Q4",
        "2021Q1", "2021Q2", "2021Q3", "2021Q4",
    ]
    _assert_gapless(series, date(2020, 1, 2), date(2021, 12, 31))


def test_half_year_and_year_series() -> None:
    halves = InstallmentSeries(date(2020, 3, 15), date(2021, 8, 31), PeriodType.HALF_YEAR)
    assert halves.names() == ["2020H1", "2020H2", "2021H1", "2021H2"]
    _assert_gapless(halves, date(2020, 3, 15), date(2021, 8, 31))

    years = InstallmentSeries(date(2020, 1, 2), date(2025, 12, 31), PeriodType.YEAR)
    assert years.names() == [f"{y}Y" for y in range(2020, 2026)]
    _assert_gapless(years, date(2020, 1, 2), date(2025, 12, 31))


def test_month_end_start_does_not_skip_february() -> None:
    series = InstallmentSeries(date(2020, 1, 31), date(2020, 4, 15), PeriodType.MONTH)

    assert series.names() == ["2020M01", "2020M02", "2020M03", "2020M04"]
    assert series[0].length == 1
    assert series[-1].length == 15
    _assert_gapless(series, date(2020, 1, 31), date(2020, 4, 15))


def test_single_partial_period() -> None:
    series = InstallmentSeries(date(2020, 5, 10), date(2020, 5, 20), PeriodType.YEAR)

    assert len(series) == 1
    assert series[0].name == "2020Y"
    assert series[0].length == 11


def test_lookup_by_date_and_name() -> None:
    series = InstallmentSeries(date(2020, 1, 2), date(2020, 12, 31), PeriodType.MONTH)

    assert series.get_installment_for_date(date(2020, 2, 29)).name == "2020M02"
    assert series.get_installment_for_date(date(2020, 1, 2)).order == 1
    assert series.get_installment_for_date(date(2020, 12, 31)).order == 12
    assert series["2020M07"].order == 7


def test_lookup_outside_series_raises() -> None:
    series = InstallmentSeries(date(2020, 1, 2), date(2020, 12, 31), PeriodType.MONTH)

    with pytest.raises(InstallmentDonoex) as excinfo:
        series.get_installment_for_date(date(2019, 1, 1))
    assert excinfo.value.day == date(2019, 1, 1)

    with pytest.raises(InstallmentDonoex):
        series.get_installment_for_date(date(2020, 1, 1))


def test_sums_start_at_zero() -> None:
    series = InstallmentSeries(date(2020, 1, 2), date(2020, 12, 31), PeriodType.MONTH)

    assert series.sum_of_interests == 0
    assert series.sum_of_capital == 0
    assert series.sum_of_totals == 0
