from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import require_date, require_date_range
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..payroll.model import round_half_up
from .factory import decide_status
from .inputs import ManualEdit
from .model import AttendanceEntry
from .reconciler import AttendanceReconciler, BulkResult, WriteResult
from .repository import AttendanceRepository
from .worksheet import WorksheetBuilder, WorksheetRow

logger = logging.getLogger(__name__)

_OVERVIEW_LABELS = {
    AttendanceStatus.PRESENT: "On-time",
    AttendanceStatus.LATE: "Late",
    AttendanceStatus.LEAVE: "Leave",
    AttendanceStatus.ABSENT: "Absent",
}


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        reconciler: AttendanceReconciler,
        *,
        worksheet: Optional[WorksheetBuilder] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._reconciler = reconciler
        self._worksheet = worksheet or WorksheetBuilder(employees, attendance)

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def list_range(self, from_value: Any, to_value: Any) -> Sequence[AttendanceEntry]:
        """Persisted entries in range, newest day first, then by employee number."""

        start, end = require_date_range(from_value, to_value)
        entries = list(self._attendance.list_range(start=start, end=end))
        entries.sort(key=lambda e: e.employee_number)
        entries.sort(key=lambda e: e.work_date, reverse=True)
        return entries

    def build_worksheet(self, from_value: Any, to_value: Any, *, department: Optional[str] = None) -> Sequence[WorksheetRow]:
        start, end = require_date_range(from_value, to_value)
        return self._worksheet.build(start, end, department=department)

    def overview(self, from_value: Any, to_value: Any, *, filter_type: Optional[str] = None) -> dict:
        """Discipline overview over the worksheet grid: status counts plus a per-day list."""

        counts = {label: 0 for label in _OVERVIEW_LABELS.values()}
        detailed: list[dict] = []

        for row in self.build_worksheet(from_value, to_value):
            entry = row.entry
            delay = 0
            if row.is_virtual:
                label, note = "Absent", "No record found"
            elif entry.status == AttendanceStatus.LEAVE:
                label, note = "Leave", "Approved leave"
            elif entry.status == AttendanceStatus.ABSENT:
                label, note = "Absent", entry.metadata.notes or "No record found"
            else:
                decision = decide_status(in_time=entry.in_time, out_time=entry.out_time, shift=entry.shift)
                label = _OVERVIEW_LABELS[decision.status]
                note, delay = decision.note, decision.delay_minutes

            counts[label] += 1
            if not filter_type or label.lower() == filter_type.lower():
                detailed.append(
                    {
                        "date": entry.work_date.isoformat(),
                        "empNumber": entry.employee_number,
                        "name": entry.employee_name,
                        "type": label,
                        "reason": note,
                        "delayMinutes": delay,
                    }
                )

        total = sum(counts.values())
        chart = [
            {"name": name, "value": value, "percentage": round_half_up(value / total * 100, 1) if total else 0.0}
            for name, value in counts.items()
        ]
        return {"chartData": chart, "detailedList": detailed, "summary": counts}

    def save_row(self, payload: Any, *, actor_id: Optional[int]) -> WriteResult:
        edit = ManualEdit.from_payload(payload)
        employee = self._employee(edit.employee_id)
        return self._reconciler.save_manual(edit, employee, actor_id=actor_id)

    def save_batch(self, rows: Any, *, actor_id: Optional[int]) -> BulkResult:
        """Validate each row on its own; valid rows are saved, invalid ones counted as failed."""

        if not isinstance(rows, list) or not rows:
            raise ValidationError("rows must be a non-empty list")

        edits: list[tuple[ManualEdit, Employee]] = []
        rejected = BulkResult()
        cache: dict[int, Optional[Employee]] = {}

        for index, payload in enumerate(rows, start=1):
            try:
                edit = ManualEdit.from_payload(payload)
                if edit.employee_id not in cache:
                    cache[edit.employee_id] = self._employees.get_by_id(edit.employee_id)
                employee = cache[edit.employee_id]
                if employee is None:
                    raise NotFoundError("Employee not found")
            except (ValidationError, NotFoundError) as e:
                rejected.failed += 1
                rejected.errors.append(f"Row {index}: {e}")
                continue
            edits.append((edit, employee))

        result = self._reconciler.save_manual_batch(edits, actor_id=actor_id)
        result.failed += rejected.failed
        result.errors = rejected.errors + result.errors
        logger.info("Batch save by %s: saved=%s failed=%s", actor_id, result.saved, result.failed)
        return result

    def delete_entry(self, employee_id: Any, date_value: Any) -> None:
        try:
            emp_id = int(employee_id)
        except (TypeError, ValueError):
            raise ValidationError("empId is required") from None
        work_date = require_date(date_value, "date")

        if not self._attendance.soft_delete(emp_id, work_date):
            raise NotFoundError("Attendance entry not found")
        logger.info("Soft-deleted entry for employee %s on %s", emp_id, work_date.isoformat())
