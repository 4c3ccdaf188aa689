import csv
import io
import json
from datetime import date

import pytest

from repayment_planner import Schedule
from repayment_planner.formatter import (
    CSV_HEADER,
    export_to_json,
    format_csv,
    format_schedule,
    print_summary,
    print_ticks,
    schedule_to_dict,
)


@pytest.fixture
def balloon() -> Schedule:
    schedule = Schedule(1200, 0.12, date(2019, 12, 31), date(2020, 12, 31), "monthly")
    schedule.add_payment(date(2020, 3, 1), 0)
    schedule.add_repayment(date(2020, 2, 15), 0)
    schedule.set_first_repayment_date(date(2020, 6, 1))
    schedule.set_repayments_balloon_style()
    return schedule.calc()


def test_text_report_sections(balloon: Schedule) -> None:
    text = format_schedule(balloon)

    assert text.startswith("Settings:\n")
    assert text.endswith("\n")
    assert "  - first day:   2020-01-01" in text
    assert "  - grace till:  2020-06-01" in text
    assert "  - last day:    2020-12-31" in text
    assert "  - repayments:  balloon" in text
    assert "  - daily calcs: no" in text
    assert "  - period type: month" in text
    assert "  - 2019-12-31:      1,200.00" in text
    assert "  - 2019-12-31: 12.00%" in text
    assert "|  12 | 2020M12 | 2020-12-01 | 2020-12-31 |   31 |         12.00 |      1,200.00 |      1,212.00 |" in text
    assert "  - capital:        1,200.00" in text
    assert "  - interests:        144.00" in text


def test_text_report_without_grace_period() -> None:
    schedule = Schedule(1000, 0.05, date(2020, 1, 1), date(2020, 3, 31), "monthly").calc()
    assert "  - grace till:  -" in format_schedule(schedule)


def test_text_report_lists_only_payment_days(balloon: Schedule) -> None:
    balloon.add_repayment(date(2020, 5, 31), 100)
    balloon.add_payment(date(2020, 7, 1), 50)
    text = format_schedule(balloon.calc())

    assert "2020-05-31" not in text.split("Interests rates:")[0]
    assert "  - 2020-07-01:         50.00" in text


def test_csv_has_header_and_one_row_per_installment(balloon: Schedule) -> None:
    rows = list(csv.reader(io.StringIO(format_csv(balloon))))

    assert rows[0] == CSV_HEADER
    assert len(rows) == 13
    assert rows[1] == ["1", "2020M01", "2020-01-01", "2020-01-31", "31", "12.00", "0.00", "12.00"]
    assert rows[-1] == ["12", "2020M12", "2020-12-01", "2020-12-31", "31", "12.00", "1200.00", "1212.00"]


def test_schedule_to_dict(balloon: Schedule) -> None:
    data = schedule_to_dict(balloon)

    assert data["summary"]["installments"] == 12
    assert data["summary"]["grace_till"] == "2020-06-01"
    assert data["summary"]["total_interest"] == 144.0
    assert data["schedule"][-1]["whole"] == 1212.0
    assert [row["number"] for row in data["schedule"]] == list(range(1, 13))


def test_export_to_json(tmp_path, balloon: Schedule) -> None:
    path = tmp_path / "schedule.json"
    export_to_json(path, balloon)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["repayments_style"] == "balloon"
    assert len(data["schedule"]) == 12


def test_print_summary(capsys, balloon: Schedule) -> None:
    print_summary(balloon.summary())
    out = capsys.readouterr().out

    assert "Grace till         : 2020-06-01" in out
    assert "Total capital      : 1200.00" in out
    assert "Total payment      : 1344.00" in out


def test_print_ticks(capsys, balloon: Schedule) -> None:
    balloon.add_rate(date(2020, 1, 10), 0.08)
    print_ticks(balloon.calc().get_rates_and_engagements_between(date(2020, 1, 1), date(2020, 1, 31)))
    lines = capsys.readouterr().out.splitlines()

    assert lines[0] == "From\tDays\tRate\tEngagement\tWeight"
    assert lines[1].split("\t")[:4] == ["2020-01-01", "9", "12.00%", "1200.00"]
    assert lines[2].split("\t")[:4] == ["2020-01-10", "22", "8.00%", "1200.00"]
