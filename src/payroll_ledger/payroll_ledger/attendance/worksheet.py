from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import iter_days
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from .model import AttendanceEntry, Financials
from .repository import AttendanceRepository


@dataclass(frozen=True)
class WorksheetRow:
    """One grid cell: a persisted entry or a virtual Absent placeholder."""

    entry: AttendanceEntry
    is_virtual: bool

    def to_dict(self) -> dict:
        data = self.entry.to_dict()
        data["isVirtual"] = self.is_virtual
        data["isModified"] = False
        return data


def virtual_entry(employee: Employee, work_date: date) -> AttendanceEntry:
    return AttendanceEntry(
        employee_id=employee.employee_id,
        work_date=work_date,
        employee_number=employee.employee_number,
        employee_name=employee.full_name,
        department=employee.department,
        shift=employee.shift,
        hourly_rate=employee.hourly_rate,
        financials=Financials.zero(scheduled_hours=employee.shift.scheduled_hours),
    )


class WorksheetBuilder:
    """Gap-free employee x day grid.

    Employees and entries are each loaded once and joined in memory on
    (employee_id, iso date).
    """

    def __init__(self, employees: EmployeeDirectory, attendance: AttendanceRepository):
        self._employees = employees
        self._attendance = attendance

    def build(self, start: date, end: date, *, department: Optional[str] = None) -> Sequence[WorksheetRow]:
        employees = list(self._employees.list_active(department=department))
        if not employees:
            return []

        entries = self._attendance.list_range(start=start, end=end, employee_ids=[e.employee_id for e in employees])
        index = {(e.employee_id, e.work_date.isoformat()): e for e in entries}

        rows: list[WorksheetRow] = []
        for day in iter_days(start, end):
            iso = day.isoformat()
            for employee in employees:
                existing = index.get((employee.employee_id, iso))
                if existing is not None:
                    rows.append(WorksheetRow(entry=existing, is_virtual=False))
                else:
                    rows.append(WorksheetRow(entry=virtual_entry(employee, day), is_virtual=True))

        rows.sort(key=lambda r: (r.entry.work_date, r.entry.employee_number))
        return rows
