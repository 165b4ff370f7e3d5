from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

from src.payroll_ledger.payroll_ledger.attendance.model import AttendanceEntry
from src.payroll_ledger.payroll_ledger.core.enums import PayrollStatus, RequestStatus, SalaryType
from src.payroll_ledger.payroll_ledger.employees.model import Employee
from src.payroll_ledger.payroll_ledger.payroll.model import PayrollSummary, PerformanceSummary
from src.payroll_ledger.payroll_ledger.requests.model import CorrectionRequest, LeaveRequest
from src.payroll_ledger.payroll_ledger.shifts.model import ShiftPolicy

FIXED_NOW = datetime(2025, 3, 10, 9, 0, 0)


def make_employee(
    employee_id: int = 1,
    number: str = "EMP001",
    *,
    first_name: str = "Asha",
    last_name: str = "Perera",
    department: str = "Engineering",
    shift: tuple[str, str] = ("09:00", "18:00"),
    hourly_rate: float = 100.0,
    monthly_salary: float = 0.0,
    salary_type: SalaryType = SalaryType.HOURLY,
    joining_date: Optional[date] = date(2024, 1, 1),
    status: str = "Active",
) -> Employee:
    return Employee(
        employee_id=employee_id,
        employee_number=number,
        first_name=first_name,
        last_name=last_name,
        department=department,
        shift=ShiftPolicy(start=shift[0], end=shift[1]),
        hourly_rate=hourly_rate,
        monthly_salary=monthly_salary,
        salary_type=salary_type,
        status=status,
        joining_date=joining_date,
    )


class InMemoryEmployees:
    def __init__(self, employees: Iterable[Employee] = ()):
        self._by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        e = self._by_id.get(int(employee_id))
        return e if e and not e.is_deleted else None

    def list_by_numbers(self, employee_numbers):
        numbers = {str(n).upper() for n in employee_numbers}
        return [e for e in self._by_id.values() if e.employee_number.upper() in numbers and not e.is_deleted]

    def list_active(self, *, department=None):
        items = [e for e in self._by_id.values() if e.is_active and (not department or e.department == department)]
        return sorted(items, key=lambda e: e.employee_number)


class InMemoryAttendance:
    def __init__(self):
        self._rows: dict[tuple[int, date], AttendanceEntry] = {}
        self._next_id = 1
        self.writes = 0

    def put(self, entry: AttendanceEntry) -> AttendanceEntry:
        self.upsert(entry)
        return self._rows[(entry.employee_id, entry.work_date)]

    def get_for_employee_and_date(self, employee_id, work_date):
        e = self._rows.get((int(employee_id), work_date))
        return None if e is None or e.is_deleted else e

    def list_range(self, *, start, end, employee_ids=None):
        ids = None if employee_ids is None else {int(i) for i in employee_ids}
        return [
            e
            for e in self._rows.values()
            if start <= e.work_date <= end and not e.is_deleted and (ids is None or e.employee_id in ids)
        ]

    def upsert(self, entry: AttendanceEntry) -> bool:
        self.writes += 1
        key = (entry.employee_id, entry.work_date)
        existing = self._rows.get(key)
        if existing is not None:
            self._rows[key] = replace(entry, entry_id=existing.entry_id, is_deleted=False)
            return False
        self._rows[key] = replace(entry, entry_id=self._next_id, is_deleted=False)
        self._next_id += 1
        return True

    def upsert_leave_day(self, entry: AttendanceEntry) -> bool:
        key = (entry.employee_id, entry.work_date)
        existing = self._rows.get(key)
        if existing is None or existing.is_deleted:
            return self.upsert(entry)
        self.writes += 1
        self._rows[key] = replace(
            existing,
            status=entry.status,
            in_time=entry.in_time,
            out_time=entry.out_time,
            out_next_day=entry.out_next_day,
            financials=entry.financials,
            ownership=entry.ownership,
            metadata=entry.metadata,
            is_deleted=False,
        )
        return False

    def soft_delete(self, employee_id, work_date) -> bool:
        key = (int(employee_id), work_date)
        existing = self._rows.get(key)
        if existing is None or existing.is_deleted:
            return False
        self._rows[key] = replace(existing, is_deleted=True)
        return True


class _PeriodRecords:
    def __init__(self):
        self._rows: dict[tuple[int, date, date], object] = {}
        self._next_id = 1

    def _key(self, summary):
        return (summary.employee_id, summary.period_start, summary.period_end)

    def get_by_id(self, record_id):
        return next((r for r in self._rows.values() if r.record_id == int(record_id)), None)

    def get_for_period(self, employee_id, start, end):
        return self._rows.get((int(employee_id), start, end))

    def save(self, summary) -> bool:
        key = self._key(summary)
        existing = self._rows.get(key)
        if existing is not None:
            self._rows[key] = replace(summary, record_id=existing.record_id)
            return False
        self._rows[key] = replace(summary, record_id=self._next_id)
        self._next_id += 1
        return True


class InMemoryPayrollRecords(_PeriodRecords):
    def list_for_period(self, start, end, *, department=None):
        return [
            r
            for r in self._rows.values()
            if r.period_start == start and r.period_end == end and (not department or r.department == department)
        ]

    def update_status(self, record_id, *, status, actor_id, at, notes=None) -> bool:
        record: Optional[PayrollSummary] = self.get_by_id(record_id)
        if record is None:
            return False
        changes = {"status": status}
        if status == PayrollStatus.APPROVED:
            changes.update(approved_by=actor_id, approved_at=at)
        elif status == PayrollStatus.PAID:
            changes.update(paid_at=at)
        else:
            changes.update(approved_by=None, approved_at=None, paid_at=None)
        if notes is not None:
            changes["notes"] = notes
        self._rows[self._key(record)] = replace(record, **changes)
        return True


class InMemoryPerformanceRecords(_PeriodRecords):
    def list_overlapping(self, start, end, *, department=None):
        return [
            r
            for r in self._rows.values()
            if r.period_start <= end and r.period_end >= start and (not department or r.department == department)
        ]

    def find_overlapping_for_employee(self, employee_id, start, end):
        items = [r for r in self.list_overlapping(start, end) if r.employee_id == int(employee_id)]
        items.sort(key=lambda r: r.period_start, reverse=True)
        return items[0] if items else None

    def list_recent_for_employee(self, employee_id, limit):
        items = [r for r in self._rows.values() if r.employee_id == int(employee_id)]
        items.sort(key=lambda r: r.period_start, reverse=True)
        return items[:limit]

    def override_score(self, record_id, *, score, rating, notes) -> bool:
        record: Optional[PerformanceSummary] = self.get_by_id(record_id)
        if record is None:
            return False
        self._rows[self._key(record)] = replace(
            record,
            performance_score=score,
            rating=rating,
            score_override=True,
            notes=notes if notes is not None else record.notes,
        )
        return True


class InMemoryRequests:
    def __init__(self, *, now: datetime = FIXED_NOW):
        self._now = now
        self._next_id = 1
        self.leaves: dict[int, LeaveRequest] = {}
        self.corrections: dict[int, CorrectionRequest] = {}

    def _id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid

    def create_leave(self, *, employee_id, employee_number, employee_name, leave_type, from_date, to_date, reason):
        rid = self._id()
        self.leaves[rid] = LeaveRequest(
            request_id=rid,
            employee_id=employee_id,
            employee_number=employee_number,
            employee_name=employee_name,
            leave_type=leave_type,
            from_date=from_date,
            to_date=to_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=self._now,
        )
        return rid

    def get_leave(self, *, request_id):
        return self.leaves.get(int(request_id))

    def has_overlapping_pending_leave(self, *, employee_id, from_date, to_date):
        return any(
            r.employee_id == employee_id
            and r.status == RequestStatus.PENDING
            and r.from_date <= to_date
            and r.to_date >= from_date
            for r in self.leaves.values()
        )

    def list_leave_requests(self, *, status=None, employee_id=None, created_since=None, limit=200):
        items = [
            r
            for r in self.leaves.values()
            if (status is None or r.status == status)
            and (employee_id is None or r.employee_id == employee_id)
            and (created_since is None or r.created_at >= created_since)
        ]
        return items[:limit]

    def decide_leave(self, *, request_id, status, decided_by, rejection_reason=None):
        req = self.leaves.get(int(request_id))
        if req is None or req.status != RequestStatus.PENDING:
            return False
        self.leaves[req.request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=self._now, rejection_reason=rejection_reason
        )
        return True

    def create_correction(
        self,
        *,
        employee_id,
        employee_number,
        employee_name,
        work_date,
        scope,
        original_in_time,
        corrected_in_time,
        original_out_time,
        corrected_out_time,
        reason,
    ):
        rid = self._id()
        self.corrections[rid] = CorrectionRequest(
            request_id=rid,
            employee_id=employee_id,
            employee_number=employee_number,
            employee_name=employee_name,
            work_date=work_date,
            scope=scope,
            original_in_time=original_in_time,
            corrected_in_time=corrected_in_time,
            original_out_time=original_out_time,
            corrected_out_time=corrected_out_time,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=self._now,
        )
        return rid

    def get_correction(self, *, request_id):
        return self.corrections.get(int(request_id))

    def has_pending_correction(self, *, employee_id, work_date):
        return any(
            r.employee_id == employee_id and r.work_date == work_date and r.status == RequestStatus.PENDING
            for r in self.corrections.values()
        )

    def list_correction_requests(self, *, status=None, employee_id=None, created_since=None, limit=200):
        items = [
            r
            for r in self.corrections.values()
            if (status is None or r.status == status)
            and (employee_id is None or r.employee_id == employee_id)
            and (created_since is None or r.created_at >= created_since)
        ]
        return items[:limit]

    def decide_correction(self, *, request_id, status, decided_by, rejection_reason=None):
        req = self.corrections.get(int(request_id))
        if req is None or req.status != RequestStatus.PENDING:
            return False
        self.corrections[req.request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=self._now, rejection_reason=rejection_reason
        )
        return True
