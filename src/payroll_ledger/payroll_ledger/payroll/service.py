from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import company_pay_period, count_working_days, format_date, now_local
from ..common.validators import require_date_range
from ..core.actor import Actor
from ..core.enums import PayrollStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from .aggregation import AggregationEngine, group_by_employee
from .model import PayrollSummary, money
from .repository import PayrollRecordRepository

logger = logging.getLogger(__name__)

EXPORT_HEADER = ("Employee Number", "Name", "Basic Earned", "OT Total", "Deductions", "Net Payable")

# Allowed workflow moves; approved can be reopened to draft before payment.
_STATUS_TRANSITIONS = {
    PayrollStatus.DRAFT: {PayrollStatus.APPROVED},
    PayrollStatus.APPROVED: {PayrollStatus.PAID, PayrollStatus.DRAFT},
    PayrollStatus.PAID: set(),
}


@dataclass(frozen=True)
class CalculationResult:
    created: int
    updated: int
    skipped: int
    period_start: date
    period_end: date

    def to_dict(self) -> dict:
        return {
            "message": (
                f"Payroll calculated: {self.created} created, {self.updated} updated, "
                f"{self.skipped} skipped (approved or paid)"
            ),
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "periodStart": format_date(self.period_start),
            "periodEnd": format_date(self.period_end),
        }


@dataclass(frozen=True)
class SalaryReport:
    rows: list[dict]
    totals: dict


def _report_row(s: PayrollSummary) -> dict:
    return {
        "id": s.record_id,
        "empId": s.employee_id,
        "empNumber": s.employee_number,
        "name": s.employee_name,
        "department": s.department,
        "basicEarned": money(s.base_salary),
        "otTotal": money(s.total_ot_amount),
        "deductionTotal": money(s.total_deduction),
        "netPayable": money(s.net_salary),
        "recordCount": len(s.daily_breakdown),
        "status": s.status.value,
    }


def _totals(rows: Sequence[dict]) -> dict:
    return {
        "totalBasicEarned": money(sum(r["basicEarned"] for r in rows)),
        "totalOT": money(sum(r["otTotal"] for r in rows)),
        "totalDeductions": money(sum(r["deductionTotal"] for r in rows)),
        "totalNetPayable": money(sum(r["netPayable"] for r in rows)),
    }


class PayrollService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        records: PayrollRecordRepository,
        *,
        engine: Optional[AggregationEngine] = None,
        clock: Callable = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._records = records
        self._engine = engine or AggregationEngine()
        self._clock = clock

    def _live_summaries(self, start: date, end: date, *, department: Optional[str] = None) -> list[PayrollSummary]:
        employees = list(self._employees.list_active(department=department))
        if not employees:
            return []

        entries = self._attendance.list_range(start=start, end=end, employee_ids=[e.employee_id for e in employees])
        by_employee = group_by_employee(entries)
        working_days = count_working_days(start, end)

        return [
            self._engine.payroll(emp, by_employee.get(emp.employee_id, []), start, end, working_days=working_days)
            for emp in employees
        ]

    def calculate(self, from_value: Any, to_value: Any, *, actor_id: Optional[int]) -> CalculationResult:
        """Recompute and store draft payroll for every active employee.

        Approved or paid records are left untouched.
        """

        start, end = require_date_range(from_value, to_value, start_name="startDate", end_name="endDate")
        created = updated = skipped = 0

        for summary in self._live_summaries(start, end):
            existing = self._records.get_for_period(summary.employee_id, start, end)
            if existing and existing.is_locked:
                skipped += 1
                continue

            stored = replace(summary, generated_by=actor_id, status=PayrollStatus.DRAFT)
            if self._records.save(stored):
                created += 1
            else:
                updated += 1

        logger.info(
            "Payroll %s..%s calculated by %s: created=%s updated=%s skipped=%s",
            start.isoformat(),
            end.isoformat(),
            actor_id,
            created,
            updated,
            skipped,
        )
        return CalculationResult(created=created, updated=updated, skipped=skipped, period_start=start, period_end=end)

    def salary_summary(self, from_value: Any, to_value: Any, *, department: Optional[str] = None) -> SalaryReport:
        """Per-employee pay for the range; stored records win over live figures."""

        start, end = require_date_range(from_value, to_value)
        stored = {r.employee_id: r for r in self._records.list_for_period(start, end, department=department)}

        summaries = [stored.get(s.employee_id, s) for s in self._live_summaries(start, end, department=department)]
        rows = [_report_row(s) for s in summaries]
        rows.sort(key=lambda r: r["name"])
        return SalaryReport(rows=rows, totals=_totals(rows))

    def employee_breakdown(self, employee_id: int, from_value: Any, to_value: Any, *, actor: Actor) -> dict:
        if not actor.is_admin and actor.user_id != int(employee_id):
            raise AuthorizationError("Unauthorized: Access restricted to your own data")

        start, end = require_date_range(from_value, to_value)
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        entries = self._attendance.list_range(start=start, end=end, employee_ids=[employee.employee_id])
        summary = self._engine.payroll(employee, entries, start, end)

        return {
            "employee": {
                "id": employee.employee_id,
                "name": employee.full_name,
                "employeeNumber": employee.employee_number,
                "hourlyRate": employee.hourly_rate,
                "salaryType": employee.salary_type.value,
                "shift": employee.shift.to_dict(),
            },
            "dailyBreakdown": [d.to_dict() for d in summary.daily_breakdown],
            "totals": {
                "basicEarned": money(summary.base_salary),
                "otTotal": money(summary.total_ot_amount),
                "deductionTotal": money(summary.total_deduction),
                "netPayable": money(summary.net_salary),
            },
        }

    def live_payroll(self, *, today: Optional[date] = None) -> dict:
        """Sum of day earnings so far in the current company pay period."""

        now = self._clock()
        today = today or now.date()
        period = company_pay_period(today)
        entries = self._attendance.list_range(start=period.start, end=min(today, period.end))
        total = sum(e.financials.final_day_earning or 0 for e in entries)

        return {
            "totalPayroll": money(total),
            "periodStart": format_date(period.start),
            "periodEnd": format_date(period.end),
            "periodLabel": period.label,
            "asOf": now.isoformat(timespec="seconds"),
        }

    def export(self, from_value: Any, to_value: Any, *, fmt: Optional[str] = "csv") -> str:
        if (fmt or "csv").lower() != "csv":
            raise ValidationError("Unsupported format")

        report = self.salary_summary(from_value, to_value)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for r in report.rows:
            writer.writerow(
                [
                    r["empNumber"],
                    r["name"],
                    f"{r['basicEarned']:.2f}",
                    f"{r['otTotal']:.2f}",
                    f"{r['deductionTotal']:.2f}",
                    f"{r['netPayable']:.2f}",
                ]
            )
        return buffer.getvalue()

    def set_status(self, record_id: int, status_value: Any, *, actor_id: Optional[int], notes: Optional[str] = None) -> PayrollSummary:
        try:
            target = PayrollStatus(status_value)
        except ValueError:
            raise ValidationError(f"Invalid payroll status '{status_value}'") from None

        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFoundError("Payroll record not found")

        if target not in _STATUS_TRANSITIONS[record.status]:
            raise ValidationError(f"Cannot move payroll from {record.status.value} to {target.value}")

        self._records.update_status(record_id, status=target, actor_id=actor_id, at=self._clock(), notes=notes)
        logger.info("Payroll record %s: %s -> %s by %s", record_id, record.status.value, target.value, actor_id)
        return self._records.get_by_id(record_id)
