from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.payroll_ledger.payroll_ledger.attendance.inputs import ManualEdit
from src.payroll_ledger.payroll_ledger.attendance.pairing import PunchPair
from src.payroll_ledger.payroll_ledger.attendance.reconciler import WriteOutcome, is_writable_by
from src.payroll_ledger.payroll_ledger.core.enums import (
    AttendanceStatus,
    CorrectionScope,
    EntrySource,
    Ownership,
)

DAY = date(2025, 3, 5)


def _manual(**overrides):
    payload = {"empId": 1, "date": DAY.isoformat(), "inTime": "09:00", "outTime": "17:00"}
    payload.update(overrides)
    return ManualEdit.from_payload(payload)


def test_csv_day_creates_system_entry(reconciler, attendance, employee):
    result = reconciler.record_csv_day(employee, DAY, PunchPair("09:10", "18:10"), batch_id="b-1")

    assert result.outcome == WriteOutcome.CREATED
    stored = attendance.get_for_employee_and_date(employee.employee_id, DAY)
    assert stored.status == AttendanceStatus.LATE
    assert stored.ownership == Ownership.SYSTEM
    assert stored.metadata.source == EntrySource.CSV
    assert stored.metadata.csv_import_batch == "b-1"
    assert stored.financials.hours_worked == pytest.approx(9.0)
    assert stored.financials.base_pay == pytest.approx(900.0)


def test_csv_skips_human_locked_entry(reconciler, attendance, employee):
    reconciler.save_manual(_manual(), employee, actor_id=99)
    writes_before = attendance.writes

    result = reconciler.record_csv_day(employee, DAY, PunchPair("09:00", "18:00"))

    assert result.outcome == WriteOutcome.SKIPPED
    assert attendance.writes == writes_before
    stored = attendance.get_for_employee_and_date(employee.employee_id, DAY)
    assert stored.out_time == "17:00"
    assert stored.ownership == Ownership.HUMAN_LOCKED


def test_csv_reimport_updates_system_entry(reconciler, attendance, employee):
    reconciler.record_csv_day(employee, DAY, PunchPair("09:00", None))
    result = reconciler.record_csv_day(employee, DAY, PunchPair("09:00", "18:00"))

    assert result.outcome == WriteOutcome.UPDATED
    stored = attendance.get_for_employee_and_date(employee.employee_id, DAY)
    assert stored.entry_id == 1
    assert stored.financials.base_pay == pytest.approx(900.0)


def test_lock_rules():
    assert is_writable_by(None, EntrySource.CSV)


def test_manual_save_locks_and_overrides(reconciler, attendance, employee):
    reconciler.record_csv_day(employee, DAY, PunchPair("09:00", "18:00"))

    result = reconciler.save_manual(_manual(otHours=2, otMultiplier=1.5, deduction=50), employee, actor_id=7)

    assert result.outcome == WriteOutcome.UPDATED
    stored = attendance.get_for_employee_and_date(employee.employee_id, DAY)
    assert stored.ownership == Ownership.HUMAN_LOCKED
    assert stored.manual_override is True
    assert stored.metadata.last_updated_by == 7
    assert stored.financials.base_pay == pytest.approx(800.0)
    assert stored.financials.ot_amount == pytest.approx(300.0)
    assert stored.financials.final_day_earning == pytest.approx(1050.0)
    assert is_writable_by(stored, EntrySource.MANUAL)
    assert not is_writable_by(stored, EntrySource.CSV)


def test_manual_status_leave_is_kept(reconciler, employee):
    result = reconciler.save_manual(_manual(status="Leave", inTime="", outTime=""), employee, actor_id=1)
    assert result.entry.status == AttendanceStatus.LEAVE
    assert result.entry.financials.final_day_earning == pytest.approx(900.0)


def test_batch_counts_failures_without_rollback(reconciler, attendance, employee):
    broken = replace(employee, shift=replace(employee.shift, start="bad"))
    edits = [
        (_manual(), employee),
        (_manual(date="2025-03-06"), broken),
        (_manual(date="2025-03-07"), employee),
    ]

    result = reconciler.save_manual_batch(edits, actor_id=1)

    assert (result.created, result.updated, result.failed, result.saved) == (2, 0, 1, 2)
    assert result.errors[0].startswith("EMP001 2025-03-06")
    assert len(attendance.list_range(start=DAY, end=date(2025, 3, 7))) == 2


def test_leave_writes_one_paid_entry_per_day(reconciler, attendance, employee):
    reconciler.save_manual(_manual(), employee, actor_id=1)

    result = reconciler.apply_leave(employee, date(2025, 3, 5), date(2025, 3, 7), actor_id=2)

    assert (result.created, result.updated, result.failed) == (2, 1, 0)
    entries = attendance.list_range(start=date(2025, 3, 5), end=date(2025, 3, 7))
    assert len(entries) == 3
    for entry in entries:
        assert entry.status == AttendanceStatus.LEAVE
        assert entry.in_time is None and entry.out_time is None
        assert entry.financials.final_day_earning == pytest.approx(900.0)
        assert entry.metadata.source == EntrySource.LEAVE_APPROVAL
    # the pre-existing manual day keeps its lock
    locked = attendance.get_for_employee_and_date(employee.employee_id, DAY)
    assert locked.ownership == Ownership.HUMAN_LOCKED


def test_leave_over_deleted_day_takes_current_rate_snapshot(reconciler, attendance, employee):
    reconciler.save_manual(_manual(), employee, actor_id=1)
    attendance.soft_delete(employee.employee_id, DAY)
    raised = replace(employee, hourly_rate=200.0)

    result = reconciler.apply_leave(raised, DAY, DAY, actor_id=2)

    assert result.failed == 0
    entry = attendance.get_for_employee_and_date(employee.employee_id, DAY)
    assert entry.hourly_rate == pytest.approx(200.0)
    assert entry.financials.final_day_earning == pytest.approx(1800.0)
    assert entry.ownership == Ownership.SYSTEM


def test_correction_keeps_ot_and_deduction(reconciler, attendance, employee):
    reconciler.save_manual(_manual(inTime="09:30", otHours=1, deduction=40), employee, actor_id=1)

    entry = reconciler.apply_correction(
        employee, DAY, scope=CorrectionScope.IN, in_time="09:00", out_time=None, actor_id=5
    )

    assert entry.in_time == "09:00"
    assert entry.out_time == "17:00"
    assert entry.status == AttendanceStatus.PRESENT
    assert entry.financials.hours_worked == pytest.approx(8.0)
    assert entry.financials.ot_amount == pytest.approx(100.0)
    assert entry.financials.deduction == pytest.approx(40.0)
    assert entry.financials.final_day_earning == pytest.approx(860.0)
    assert entry.ownership == Ownership.HUMAN_LOCKED
    assert entry.metadata.source == EntrySource.CORRECTION_APPROVAL


def test_correction_without_entry_creates_one(reconciler, attendance, employee):
    entry = reconciler.apply_correction(
        employee, DAY, scope=CorrectionScope.BOTH, in_time="22:00", out_time="02:00", actor_id=5
    )

    assert entry.out_next_day is True
    assert entry.financials.hours_worked == pytest.approx(4.0)
    assert attendance.get_for_employee_and_date(employee.employee_id, DAY) is not None
