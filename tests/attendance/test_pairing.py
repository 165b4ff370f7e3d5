from __future__ import annotations

from datetime import date

import pytest

from src.payroll_ledger.payroll_ledger.attendance.csv_parser import PunchRow
from src.payroll_ledger.payroll_ledger.attendance.pairing import merge_typed_punches, pair_punches
from src.payroll_ledger.payroll_ledger.common.time_utils import hours_between
from src.payroll_ledger.payroll_ledger.core.enums import PunchFlag


def test_day_shift_pair():
    pair = pair_punches("09:00", ["18:02", "09:05"])
    assert (pair.in_time, pair.out_time, pair.out_next_day) == ("09:05", "18:02", False)
    assert pair.is_complete


def test_out_punch_beyond_14_hours_is_dropped():
    pair = pair_punches("09:00", ["09:05", "23:40"])
    assert pair.in_time == "09:05"
    assert pair.out_time is None
    assert not pair.is_complete


def test_night_shift_wraps_midnight():
    pair = pair_punches("22:00", ["05:45", "22:10"])

    assert pair.in_time == "22:10"
    assert pair.out_time == "05:45"
    assert pair.out_next_day is True
    assert hours_between(pair.in_time, pair.out_time, pair.out_next_day) == pytest.approx(7.5833, abs=1e-4)


def test_first_later_punch_is_out_and_extras_are_ignored():
    pair = pair_punches("09:00", ["09:00", "12:30", "13:15", "18:00"])
    assert (pair.in_time, pair.out_time) == ("09:00", "12:30")


def test_no_punch_in_window_gives_empty_pair():
    assert pair_punches("09:00", []).is_empty
    # 08:30 sits on the timeline at 32:30, past the 23:00 window end
    assert pair_punches("09:00", ["08:30"]).is_empty


def test_custom_window():
    pair = pair_punches("09:00", ["09:00", "20:00"], window_hours=10)
    assert pair.out_time is None


def _row(n: int, t: str, flag: PunchFlag) -> PunchRow:
    return PunchRow(
        row_number=n,
        employee_number="EMP001",
        first_name="Asha",
        last_name="Perera",
        work_date=date(2025, 3, 5),
        time=t,
        flag=flag,
    )


def test_typed_merge_uses_earliest_in_and_latest_out():
    rows = [
        _row(1, "09:10", PunchFlag.IN),
        _row(2, "09:02", PunchFlag.IN),
        _row(3, "13:00", PunchFlag.OUT),
        _row(4, "18:30", PunchFlag.OUT),
    ]
    pair = merge_typed_punches("09:00", rows)
    assert (pair.in_time, pair.out_time, pair.out_next_day) == ("09:02", "18:30", False)


def test_typed_merge_night_shift():
    rows = [_row(1, "22:05", PunchFlag.IN), _row(2, "23:50", PunchFlag.OUT), _row(3, "06:10", PunchFlag.OUT)]
    pair = merge_typed_punches("22:00", rows)
    assert (pair.in_time, pair.out_time, pair.out_next_day) == ("22:05", "06:10", True)


def test_typed_merge_only_out():
    pair = merge_typed_punches("09:00", [_row(1, "18:00", PunchFlag.OUT)])
    assert pair.in_time is None
    assert pair.out_time == "18:00"
    assert pair.out_next_day is False
