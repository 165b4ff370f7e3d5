from __future__ import annotations

import pytest

from src.payroll_ledger.payroll_ledger.attendance.reconciler import AttendanceReconciler
from src.payroll_ledger.payroll_ledger.container import wire_container
from src.payroll_ledger.payroll_ledger.payroll.calculator.financial_calculator import FinancialCalculator
from tests.fakes import (
    FIXED_NOW,
    InMemoryAttendance,
    InMemoryEmployees,
    InMemoryPayrollRecords,
    InMemoryPerformanceRecords,
    InMemoryRequests,
    make_employee,
)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def employee():
    return make_employee()


@pytest.fixture
def employees(employee):
    return InMemoryEmployees([employee])


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def reconciler(attendance, fixed_now):
    return AttendanceReconciler(attendance, calculator=FinancialCalculator(), clock=lambda: fixed_now)


@pytest.fixture
def container(employees, attendance):
    return wire_container(
        conn=None,
        employees_repo=employees,
        attendance_repo=attendance,
        payroll_records_repo=InMemoryPayrollRecords(),
        performance_records_repo=InMemoryPerformanceRecords(),
        requests_repo=InMemoryRequests(),
    )
