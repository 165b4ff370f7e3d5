from __future__ import annotations

from datetime import date

from src.payroll_ledger.payroll_ledger.attendance.pairing import PunchPair
from src.payroll_ledger.payroll_ledger.attendance.worksheet import WorksheetBuilder
from tests.fakes import InMemoryEmployees, make_employee


def test_grid_has_one_row_per_employee_per_day(employees, attendance, reconciler, employee):
    employees.add(make_employee(2, "EMP002", first_name="Ravi", last_name="Kumar", department="Ops"))
    reconciler.record_csv_day(employee, date(2025, 3, 6), PunchPair("09:00", "18:00"))

    rows = WorksheetBuilder(employees, attendance).build(date(2025, 3, 5), date(2025, 3, 6))

    assert [(r.entry.work_date.day, r.entry.employee_number, r.is_virtual) for r in rows] == [
        (5, "EMP001", True),
        (5, "EMP002", True),
        (6, "EMP001", False),
        (6, "EMP002", True),
    ]
    virtual = rows[0].to_dict()
    assert virtual["isVirtual"] is True
    assert virtual["status"] == "Absent"
    assert virtual["financials"]["scheduledHours"] == 9.0
    assert virtual["id"] is None


def test_department_filter_and_inactive_employees(employees, attendance):
    employees.add(make_employee(2, "EMP002", department="Ops"))
    employees.add(make_employee(3, "EMP003", department="Ops", status="Inactive"))

    rows = WorksheetBuilder(employees, attendance).build(date(2025, 3, 5), date(2025, 3, 5), department="Ops")

    assert [r.entry.employee_number for r in rows] == ["EMP002"]


def test_no_employees_gives_empty_grid(attendance):
    assert WorksheetBuilder(InMemoryEmployees(), attendance).build(date(2025, 3, 5), date(2025, 3, 6)) == []
