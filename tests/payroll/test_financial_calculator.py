from __future__ import annotations

import pytest

from src.payroll_ledger.payroll_ledger.attendance.model import DeductionItem, OtItem
from src.payroll_ledger.payroll_ledger.core.enums import AttendanceStatus, OtEntryType
from src.payroll_ledger.payroll_ledger.payroll.calculator.factory import PayCaseFactory
from src.payroll_ledger.payroll_ledger.payroll.calculator.financial_calculator import (
    DeductionInput,
    FinancialCalculator,
    OtInput,
    compute_financials,
)
from src.payroll_ledger.payroll_ledger.shifts.model import ShiftPolicy

DAY = ShiftPolicy(start="09:00", end="18:00")
NIGHT = ShiftPolicy(start="22:00", end="06:00")


@pytest.fixture
def calc():
    return FinancialCalculator()


def test_full_pair_pays_actual_hours(calc):
    f = calc.compute(
        status=AttendanceStatus.PRESENT, in_time="09:00", out_time="17:30", shift=DAY, hourly_rate=100
    )
    assert f.hours_worked == pytest.approx(8.5)
    assert f.scheduled_hours == pytest.approx(9.0)
    assert f.base_pay == pytest.approx(850.0)
    assert f.final_day_earning == pytest.approx(850.0)


def test_night_shift_crosses_midnight(calc):
    f = calc.compute(
        status=AttendanceStatus.LATE,
        in_time="22:10",
        out_time="05:45",
        out_next_day=True,
        shift=NIGHT,
        hourly_rate=60,
    )
    assert f.scheduled_hours == pytest.approx(8.0)
    assert f.base_pay == pytest.approx(7.5833 * 60, abs=0.01)


def test_partial_punch_pays_half_the_scheduled_day(calc):
    f = calc.compute(status=AttendanceStatus.PRESENT, in_time="09:00", out_time=None, shift=DAY, hourly_rate=100)
    assert f.hours_worked == pytest.approx(9.0)
    assert f.base_pay == pytest.approx(450.0)

    custom = FinancialCalculator(factory=PayCaseFactory(partial_factor=0.25))
    f = custom.compute(status=AttendanceStatus.PRESENT, in_time=None, out_time="18:00", shift=DAY, hourly_rate=100)
    assert f.base_pay == pytest.approx(225.0)


def test_leave_and_absent(calc):
    leave = calc.compute(status=AttendanceStatus.LEAVE, in_time=None, out_time=None, shift=DAY, hourly_rate=100)
    assert leave.final_day_earning == pytest.approx(900.0)

    # absent status wins over stray punches
    absent = calc.compute(status=AttendanceStatus.ABSENT, in_time="09:00", out_time="18:00", shift=DAY, hourly_rate=100)
    assert absent.base_pay == 0
    assert absent.hours_worked == 0


def test_final_earning_never_negative(calc):
    f = calc.compute(
        status=AttendanceStatus.PRESENT,
        in_time="09:00",
        out_time="10:00",
        shift=DAY,
        hourly_rate=100,
        deduction=DeductionInput(amount=500),
    )
    assert f.deduction == 500
    assert f.final_day_earning == 0


def test_details_take_precedence_over_flat_values(calc):
    f = calc.compute(
        status=AttendanceStatus.PRESENT,
        in_time="09:00",
        out_time="18:00",
        shift=DAY,
        hourly_rate=100,
        ot=OtInput(
            hours=10,
            multiplier=2,
            details=(
                OtItem(type=OtEntryType.MANUAL, reason="Bonus", amount=150),
                OtItem(type=OtEntryType.CALC, reason="Stock take", hours=2, rate=1.5),
            ),
        ),
        deduction=DeductionInput(amount=999, details=(DeductionItem(amount=30, reason="Uniform"),)),
    )

    assert f.ot_amount == pytest.approx(450.0)
    assert f.ot_hours == pytest.approx(2.0)
    assert f.deduction == pytest.approx(30.0)
    assert f.final_day_earning == pytest.approx(900 - 30 + 450)
    assert len(f.ot_details) == 2


def test_invalid_multiplier_falls_back(calc):
    f = calc.compute(
        status=AttendanceStatus.PRESENT,
        in_time="09:00",
        out_time="18:00",
        shift=DAY,
        hourly_rate=100,
        ot=OtInput(hours=1, multiplier=3),
    )
    assert f.ot_multiplier == 1
    assert f.ot_amount == pytest.approx(100.0)


def test_compute_is_idempotent(calc):
    kwargs = dict(
        status=AttendanceStatus.PRESENT,
        in_time="09:00",
        out_time="18:00",
        shift=DAY,
        hourly_rate=100,
        ot=OtInput(hours=1.5, multiplier=1.5),
    )
    assert calc.compute(**kwargs) == calc.compute(**kwargs)


def test_recompute_base_keeps_ot_and_deduction(calc):
    original = compute_financials(
        status=AttendanceStatus.PRESENT,
        in_time="09:00",
        out_time="13:00",
        shift=DAY,
        hourly_rate=100,
        ot_hours=1,
        ot_multiplier=2,
        deduction=50,
    )

    fixed = calc.recompute_base(
        original,
        status=AttendanceStatus.PRESENT,
        in_time="09:00",
        out_time="18:00",
        out_next_day=False,
        shift=DAY,
        hourly_rate=100,
    )

    assert fixed.hours_worked == pytest.approx(9.0)
    assert fixed.base_pay == pytest.approx(900.0)
    assert fixed.ot_amount == original.ot_amount == pytest.approx(200.0)
    assert fixed.deduction == pytest.approx(50.0)
    assert fixed.final_day_earning == pytest.approx(1050.0)


def test_missing_rate_pays_nothing(calc):
    f = calc.compute(status=AttendanceStatus.PRESENT, in_time="09:00", out_time="18:00", shift=DAY, hourly_rate=None)
    assert f.final_day_earning == 0
