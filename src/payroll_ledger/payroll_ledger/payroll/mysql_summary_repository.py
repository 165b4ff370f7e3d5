from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import PayrollStatus, Rating, SalaryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json_list
from .model import DailyBreakdown, PayrollSummary, PerformanceSummary
from .repository import PayrollRecordRepository, PerformanceRecordRepository

_PAYROLL_COLUMNS = """
    record_id, employee_id, employee_number, employee_name, department,
    period_start, period_end, period_label, salary_type, total_working_days,
    present_days, late_days, absent_days, leave_days, total_hours_worked,
    base_salary, total_deduction, total_ot_hours, total_ot_amount, net_salary,
    daily_breakdown, status, generated_by, approved_by, approved_at, paid_at, notes
"""

_PERFORMANCE_COLUMNS = """
    record_id, employee_id, employee_number, employee_name, department,
    period_start, period_end, period_label, total_working_days,
    present_days, late_days, absent_days, leave_days, total_hours_worked,
    total_ot_hours, attendance_rate, punctuality_rate, performance_score,
    rating, score_override, generated_by, notes
"""


def _row_to_payroll(r: dict) -> PayrollSummary:
    return PayrollSummary(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        employee_number=str(r["employee_number"]),
        employee_name=r["employee_name"],
        department=r.get("department") or "",
        period_start=r["period_start"],
        period_end=r["period_end"],
        period_label=r.get("period_label") or "",
        salary_type=SalaryType(r.get("salary_type") or SalaryType.HOURLY.value),
        total_working_days=int(r.get("total_working_days") or 0),
        present_days=int(r.get("present_days") or 0),
        late_days=int(r.get("late_days") or 0),
        absent_days=int(r.get("absent_days") or 0),
        leave_days=int(r.get("leave_days") or 0),
        total_hours_worked=float(r.get("total_hours_worked") or 0),
        base_salary=float(r.get("base_salary") or 0),
        total_deduction=float(r.get("total_deduction") or 0),
        total_ot_hours=float(r.get("total_ot_hours") or 0),
        total_ot_amount=float(r.get("total_ot_amount") or 0),
        net_salary=float(r.get("net_salary") or 0),
        daily_breakdown=tuple(DailyBreakdown.from_dict(d) for d in load_json_list(r.get("daily_breakdown"))),
        status=PayrollStatus(r.get("status") or PayrollStatus.DRAFT.value),
        generated_by=r.get("generated_by"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        paid_at=r.get("paid_at"),
        notes=r.get("notes"),
    )


def _row_to_performance(r: dict) -> PerformanceSummary:
    return PerformanceSummary(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        employee_number=str(r["employee_number"]),
        employee_name=r["employee_name"],
        department=r.get("department") or "",
        period_start=r["period_start"],
        period_end=r["period_end"],
        period_label=r.get("period_label") or "",
        total_working_days=int(r.get("total_working_days") or 0),
        present_days=int(r.get("present_days") or 0),
        late_days=int(r.get("late_days") or 0),
        absent_days=int(r.get("absent_days") or 0),
        leave_days=int(r.get("leave_days") or 0),
        total_hours_worked=float(r.get("total_hours_worked") or 0),
        total_ot_hours=float(r.get("total_ot_hours") or 0),
        attendance_rate=float(r.get("attendance_rate") or 0),
        punctuality_rate=float(r.get("punctuality_rate") or 0),
        performance_score=int(r.get("performance_score") or 0),
        rating=Rating(r.get("rating") or Rating.POOR.value),
        score_override=bool(r.get("score_override")),
        generated_by=r.get("generated_by"),
        notes=r.get("notes"),
    )


def _upsert(cur, table: str, row: dict, key_columns: Sequence[str]) -> bool:
    columns = list(row.keys())
    updates = ", ".join(f"{c}=VALUES({c})" for c in columns if c not in key_columns)
    cur.execute(
        f"""
        INSERT INTO {table} ({", ".join(columns)})
        VALUES ({", ".join(["%s"] * len(columns))})
        ON DUPLICATE KEY UPDATE {updates}
        """,
        tuple(row[c] for c in columns),
    )
    return cur.rowcount == 1


_PERIOD_KEY = ("employee_id", "period_start", "period_end")


class MySQLPayrollRecordRepository(PayrollRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[PayrollSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PAYROLL_COLUMNS} FROM payroll_records WHERE record_id=%s AND is_deleted=0",
                (int(record_id),),
            )
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def get_for_period(self, employee_id: int, start: date, end: date) -> Optional[PayrollSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAYROLL_COLUMNS}
                FROM payroll_records
                WHERE employee_id=%s AND period_start=%s AND period_end=%s AND is_deleted=0
                """,
                (int(employee_id), start, end),
            )
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def list_for_period(self, start: date, end: date, *, department: Optional[str] = None) -> Sequence[PayrollSummary]:
        sql = f"""
            SELECT {_PAYROLL_COLUMNS}
            FROM payroll_records
            WHERE period_start=%s AND period_end=%s AND is_deleted=0
        """
        params: list[object] = [start, end]
        if department:
            sql += " AND department=%s"
            params.append(department)
        sql += " ORDER BY employee_number ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_payroll(r) for r in fetchall(cur)]

    def save(self, summary: PayrollSummary) -> bool:
        row = {
            "employee_id": summary.employee_id,
            "period_start": summary.period_start,
            "period_end": summary.period_end,
            "employee_number": summary.employee_number,
            "employee_name": summary.employee_name,
            "department": summary.department,
            "period_label": summary.period_label,
            "salary_type": summary.salary_type.value,
            "total_working_days": summary.total_working_days,
            "present_days": summary.present_days,
            "late_days": summary.late_days,
            "absent_days": summary.absent_days,
            "leave_days": summary.leave_days,
            "total_hours_worked": summary.total_hours_worked,
            "base_salary": summary.base_salary,
            "total_deduction": summary.total_deduction,
            "total_ot_hours": summary.total_ot_hours,
            "total_ot_amount": summary.total_ot_amount,
            "net_salary": summary.net_salary,
            "daily_breakdown": dump_json([d.to_dict() for d in summary.daily_breakdown]),
            "status": summary.status.value,
            "generated_by": summary.generated_by,
        }
        with db_cursor(self._conn_factory) as (_, cur):
            return _upsert(cur, "payroll_records", row, _PERIOD_KEY)

    def update_status(
        self,
        record_id: int,
        *,
        status: PayrollStatus,
        actor_id: Optional[int],
        at: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        sets = ["status=%s"]
        params: list[object] = [status.value]

        if status == PayrollStatus.APPROVED:
            sets += ["approved_by=%s", "approved_at=%s"]
            params += [actor_id, at]
        elif status == PayrollStatus.PAID:
            sets.append("paid_at=%s")
            params.append(at)
        else:
            sets += ["approved_by=NULL", "approved_at=NULL", "paid_at=NULL"]

        if notes is not None:
            sets.append("notes=%s")
            params.append(notes)

        params.append(int(record_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_records SET {', '.join(sets)} WHERE record_id=%s AND is_deleted=0",
                tuple(params),
            )
            return cur.rowcount > 0


class MySQLPerformanceRecordRepository(PerformanceRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, where: str, params: tuple) -> Optional[PerformanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERFORMANCE_COLUMNS} FROM performance_records WHERE {where}", params)
            r = fetchone(cur)
            return _row_to_performance(r) if r else None

    def get_by_id(self, record_id: int) -> Optional[PerformanceSummary]:
        return self._select_one("record_id=%s AND is_deleted=0", (int(record_id),))

    def get_for_period(self, employee_id: int, start: date, end: date) -> Optional[PerformanceSummary]:
        return self._select_one(
            "employee_id=%s AND period_start=%s AND period_end=%s AND is_deleted=0",
            (int(employee_id), start, end),
        )

    def find_overlapping_for_employee(self, employee_id: int, start: date, end: date) -> Optional[PerformanceSummary]:
        return self._select_one(
            "employee_id=%s AND period_start<=%s AND period_end>=%s AND is_deleted=0 ORDER BY period_start DESC LIMIT 1",
            (int(employee_id), end, start),
        )

    def list_overlapping(self, start: date, end: date, *, department: Optional[str] = None) -> Sequence[PerformanceSummary]:
        sql = f"""
            SELECT {_PERFORMANCE_COLUMNS}
            FROM performance_records
            WHERE period_start<=%s AND period_end>=%s AND is_deleted=0
        """
        params: list[object] = [end, start]
        if department:
            sql += " AND department=%s"
            params.append(department)
        sql += " ORDER BY employee_number ASC, period_start ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_performance(r) for r in fetchall(cur)]

    def list_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[PerformanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PERFORMANCE_COLUMNS}
                FROM performance_records
                WHERE employee_id=%s AND is_deleted=0
                ORDER BY period_start DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_performance(r) for r in fetchall(cur)]

    def save(self, summary: PerformanceSummary) -> bool:
        row = {
            "employee_id": summary.employee_id,
            "period_start": summary.period_start,
            "period_end": summary.period_end,
            "employee_number": summary.employee_number,
            "employee_name": summary.employee_name,
            "department": summary.department,
            "period_label": summary.period_label,
            "total_working_days": summary.total_working_days,
            "present_days": summary.present_days,
            "late_days": summary.late_days,
            "absent_days": summary.absent_days,
            "leave_days": summary.leave_days,
            "total_hours_worked": summary.total_hours_worked,
            "total_ot_hours": summary.total_ot_hours,
            "attendance_rate": summary.attendance_rate,
            "punctuality_rate": summary.punctuality_rate,
            "performance_score": summary.performance_score,
            "rating": summary.rating.value,
            "score_override": 1 if summary.score_override else 0,
            "generated_by": summary.generated_by,
        }
        with db_cursor(self._conn_factory) as (_, cur):
            return _upsert(cur, "performance_records", row, _PERIOD_KEY)

    def override_score(self, record_id: int, *, score: int, rating: Rating, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE performance_records
                SET performance_score=%s, rating=%s, score_override=1, notes=COALESCE(%s, notes)
                WHERE record_id=%s AND is_deleted=0
                """,
                (int(score), rating.value, notes, int(record_id)),
            )
            return cur.rowcount > 0
