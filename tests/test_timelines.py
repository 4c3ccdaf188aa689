from datetime import date
from decimal import Decimal

import pytest

from repayment_planner.errors import NegativePayment, NegativeRate
from repayment_planner.timelines import FlowLedger, RateTimeline, StepTimeline, compress_ticks, sum_weights


def test_rate_is_step_function_of_day() -> None:
    rates = RateTimeline()
    rates.add_rate(date(2020, 6, 1), 0.08)
    rates.add_rate(date(2020, 1, 1), 0.05)

    assert rates.rate_at(date(2019, 12, 31)) == 0
    assert rates.rate_at(date(2020, 1, 1)) == Decimal("0.05")
    assert rates.rate_at(date(2020, 5, 31)) == Decimal("0.05")
    assert rates.rate_at(date(2020, 6, 1)) == Decimal("0.08")
    assert rates.rate_at(date(2030, 1, 1)) == Decimal("0.08")
    assert [e.date for e in rates.entries] == [date(2020, 1, 1), date(2020, 6, 1)]


def test_rate_for_same_day_is_overwritten() -> None:
    rates = RateTimeline()
    rates.add_rate(date(2020, 1, 1), "0.05")
    rates.add_rate(date(2020, 1, 1), "0.07")

    assert len(rates.entries) == 1
    assert rates.rate_at(date(2020, 2, 1)) == Decimal("0.07")


def test_negative_rate_raises() -> None:
    with pytest.raises(NegativeRate) as excinfo:
        RateTimeline().add_rate(date(2020, 1, 1), -0.05)
    assert excinfo.value.rate == Decimal("-0.05")
    assert excinfo.value.day == date(2020, 1, 1)


def test_payments_on_same_day_add_up_or_overwrite() -> None:
    ledger = FlowLedger()
    ledger.add_payment(date(2020, 1, 1), 500)
    ledger.add_payment(date(2020, 1, 1), 600)
    assert ledger.flows[0].payment == 1100

    ledger.add_payment(date(2020, 1, 1), 1000, overwrite=True)
    assert len(ledger.flows) == 1
    assert ledger.flows[0].payment == 1000
    assert ledger.flows[0].repayment == 0
    assert ledger.flows[0].balance == 1000


def test_flows_stay_sorted() -> None:
    ledger = FlowLedger()
    ledger.add_payment(date(2020, 5, 1), 100)
    ledger.add_repayment(date(2020, 3, 1), 50)
    ledger.add_payment(date(2020, 1, 1), 100)

    assert [f.date for f in ledger.flows] == [date(2020, 1, 1), date(2020, 3, 1), date(2020, 5, 1)]


def test_zero_payment_is_ignored() -> None:
    ledger = FlowLedger()
    ledger.add_payment(date(2020, 1, 1), 0)
    ledger.add_repayment(date(2020, 1, 1), 0.0)
    assert ledger.flows == []


def test_negative_payment_raises_but_negative_repayment_corrects() -> None:
    ledger = FlowLedger()
    with pytest.raises(NegativePayment):
        ledger.add_payment(date(2020, 1, 1), -1000)

    ledger.add_payment(date(2020, 1, 1), 1000)
    ledger.add_repayment(date(2020, 2, 1), 300)
    ledger.add_repayment(date(2020, 2, 1), -100)

    assert ledger.flows[1].repayment == 200
    assert ledger.net_principal() == 800
    assert ledger.net_principal(until=date(2020, 1, 31)) == 1000
    assert ledger.repayments_between(date(2020, 2, 1), date(2020, 2, 29)) == 200


def test_engagement_changes_the_day_after_a_flow() -> None:
    ledger = FlowLedger()
    ledger.add_payment(date(2020, 1, 1), 1000)
    ledger.add_repayment(date(2020, 3, 31), 200)
    timeline = ledger.engagements()

    assert timeline.value_at(date(2019, 6, 1)) == 0
    assert timeline.value_at(date(2020, 1, 1)) == 0
    assert timeline.value_at(date(2020, 1, 2)) == 1000
    assert timeline.value_at(date(2020, 3, 31)) == 1000
    assert timeline.value_at(date(2020, 4, 1)) == 800
    assert timeline.value_at(date(2030, 1, 1)) == 800


def test_engagement_includes_scheduled_capital() -> None:
    ledger = FlowLedger()
    ledger.add_payment(date(2020, 1, 1), 1000)
    ledger.add_repayment(date(2020, 1, 31), 50)
    timeline = ledger.engagements({date(2020, 1, 31): Decimal(100), date(2020, 2, 29): Decimal(850)})

    assert timeline.items() == [
        (date(2020, 1, 2), Decimal(1000)),
        (date(2020, 2, 1), Decimal(850)),
        (date(2020, 3, 1), Decimal(0)),
    ]


def test_step_timeline_is_empty_by_default() -> None:
    timeline = StepTimeline()
    assert len(timeline) == 0
    assert timeline.value_at(date(2020, 1, 1)) == 0


def _draw_and_rates():
    ledger = FlowLedger()
    ledger.add_payment(date(2020, 1, 1), 1000)
    ledger.add_payment(date(2020, 1, 15), 500)
    rates = RateTimeline()
    rates.add_rate(date(2020, 1, 1), 0.05)
    rates.add_rate(date(2020, 1, 20), 0.06)
    return ledger.engagements(), rates


def test_ticks_compress_runs_of_identical_days() -> None:
    engagements, rates = _draw_and_rates()
    ticks = compress_ticks(date(2020, 1, 2), date(2020, 1, 31), rates.rate_at, engagements.value_at)

    assert [(t.first_day, t.annual_rate, t.engagement, t.days) for t in ticks] == [
        (date(2020, 1, 2), Decimal("0.05"), Decimal(1000), 14),
        (date(2020, 1, 16), Decimal("0.05"), Decimal(1500), 4),
        (date(2020, 1, 20), Decimal("0.06"), Decimal(1500), 12),
    ]
    assert sum_weights(ticks) == 1
    assert abs(ticks[1].percentage - Decimal(4) / Decimal(30)) < Decimal("1e-18")


def test_ticks_do_not_merge_non_adjacent_runs() -> None:
    rates = RateTimeline()
    rates.add_rate(date(2020, 1, 1), 0.05)
    rates.add_rate(date(2020, 1, 10), 0.06)
    rates.add_rate(date(2020, 1, 20), 0.05)
    engagements = StepTimeline({date(2020, 1, 1): Decimal(100)})

    ticks = compress_ticks(date(2020, 1, 1), date(2020, 1, 31), rates.rate_at, engagements.value_at)

    assert [t.days for t in ticks] == [9, 10, 12]
    assert ticks[0].annual_rate == ticks[2].annual_rate
    assert sum_weights(ticks) == 1


def test_weights_of_uneven_runs_sum_to_exactly_one() -> None:
    rates = RateTimeline()
    rates.add_rate(date(2020, 1, 1), 0.01)
    for day in (3, 10, 17, 23):
        rates.add_rate(date(2020, 1, day), Decimal(day) / 1000)
    engagements = StepTimeline({date(2020, 1, 1): Decimal(1)})

    ticks = compress_ticks(date(2020, 1, 1), date(2020, 1, 29), rates.rate_at, engagements.value_at)

    assert len(ticks) == 5
    assert sum(t.days for t in ticks) == 29
    assert sum_weights(ticks) == 1


def test_single_day_range() -> None:
    engagements, rates = _draw_and_rates()
    ticks = compress_ticks(date(2020, 1, 5), date(2020, 1, 5), rates.rate_at, engagements.value_at)

    assert len(ticks) == 1
    assert ticks[0].days == 1
    assert ticks[0].percentage == 1
