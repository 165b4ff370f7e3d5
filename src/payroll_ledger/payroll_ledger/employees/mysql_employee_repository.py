from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import SalaryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_hhmm
from ..shifts.model import ShiftPolicy
from .model import Employee
from .repository import EmployeeDirectory

_COLUMNS = """
    employee_id, employee_number, first_name, last_name, department,
    shift_start, shift_end, hourly_rate, monthly_salary, salary_type,
    status, joining_date, is_archived, is_deleted
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_number=str(r["employee_number"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        department=r.get("department") or "",
        shift=ShiftPolicy(start=normalize_mysql_hhmm(r["shift_start"]), end=normalize_mysql_hhmm(r["shift_end"])),
        hourly_rate=float(r.get("hourly_rate") or 0),
        monthly_salary=float(r.get("monthly_salary") or 0),
        salary_type=SalaryType(r.get("salary_type") or SalaryType.HOURLY.value),
        status=r.get("status") or "Inactive",
        joining_date=r.get("joining_date"),
        is_archived=bool(r.get("is_archived")),
        is_deleted=bool(r.get("is_deleted")),
    )


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s AND is_deleted=0",
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def list_by_numbers(self, employee_numbers: Iterable[str]) -> Sequence[Employee]:
        numbers = sorted({str(n) for n in employee_numbers})
        if not numbers:
            return []

        placeholders = ",".join(["%s"] * len(numbers))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE employee_number IN ({placeholders}) AND is_deleted=0
                """,
                tuple(numbers),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def list_active(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        clauses = ["status='Active'", "is_archived=0", "is_deleted=0"]
        params: list[object] = []
        if department:
            clauses.append("department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE {" AND ".join(clauses)}
                ORDER BY employee_number ASC
                """,
                tuple(params),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]
