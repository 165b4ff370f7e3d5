from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..common.datetime_utils import format_date, format_datetime, parse_date
from ..core.enums import AttendanceStatus, PayrollStatus, Rating, SalaryType


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Commercial rounding: .5 always goes away from zero, unlike round()."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value or 0)).quantize(quantum, rounding=ROUND_HALF_UP))


def money(value: float) -> float:
    """Display rounding for report amounts."""
    return round_half_up(value, 2)


@dataclass(frozen=True)
class DailyBreakdown:
    """Per-day snapshot carried on a payroll record."""

    work_date: date
    status: AttendanceStatus
    in_time: Optional[str]
    out_time: Optional[str]
    hours_worked: float
    base_pay: float
    deduction: float
    ot_hours: float
    ot_amount: float
    final_day_earning: float

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "inTime": self.in_time,
            "outTime": self.out_time,
            "hoursWorked": round(self.hours_worked, 2),
            "basePay": money(self.base_pay),
            "deduction": money(self.deduction),
            "otHours": round(self.ot_hours, 2),
            "otAmount": money(self.ot_amount),
            "finalDayEarning": money(self.final_day_earning),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyBreakdown":
        return cls(
            work_date=parse_date(data.get("date")),
            status=AttendanceStatus(data.get("status") or AttendanceStatus.ABSENT.value),
            in_time=data.get("inTime"),
            out_time=data.get("outTime"),
            hours_worked=float(data.get("hoursWorked") or 0),
            base_pay=float(data.get("basePay") or 0),
            deduction=float(data.get("deduction") or 0),
            ot_hours=float(data.get("otHours") or 0),
            ot_amount=float(data.get("otAmount") or 0),
            final_day_earning=float(data.get("finalDayEarning") or 0),
        )


@dataclass(frozen=True)
class PayrollSummary:
    employee_id: int
    employee_number: str
    employee_name: str
    department: str
    period_start: date
    period_end: date
    period_label: str
    salary_type: SalaryType
    total_working_days: int
    present_days: int
    late_days: int
    absent_days: int
    leave_days: int
    total_hours_worked: float
    base_salary: float
    total_deduction: float
    total_ot_hours: float
    total_ot_amount: float
    net_salary: float
    daily_breakdown: tuple[DailyBreakdown, ...] = ()
    status: PayrollStatus = PayrollStatus.DRAFT
    record_id: Optional[int] = None
    generated_by: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def is_locked(self) -> bool:
        """Approved or paid records are admin-fixed; recalculation leaves them alone."""
        return self.status != PayrollStatus.DRAFT

    def to_dict(self, *, include_breakdown: bool = False) -> dict:
        data = {
            "id": self.record_id,
            "empId": self.employee_id,
            "empNumber": self.employee_number,
            "empName": self.employee_name,
            "department": self.department,
            "periodStart": format_date(self.period_start),
            "periodEnd": format_date(self.period_end),
            "periodLabel": self.period_label,
            "salaryType": self.salary_type.value,
            "totalWorkingDays": self.total_working_days,
            "presentDays": self.present_days,
            "lateDays": self.late_days,
            "absentDays": self.absent_days,
            "leaveDays": self.leave_days,
            "totalHoursWorked": round(self.total_hours_worked, 2),
            "baseSalary": money(self.base_salary),
            "totalDeduction": money(self.total_deduction),
            "totalOtHours": round(self.total_ot_hours, 2),
            "totalOtAmount": money(self.total_ot_amount),
            "netSalary": money(self.net_salary),
            "status": self.status.value,
            "approvedAt": format_datetime(self.approved_at),
            "paidAt": format_datetime(self.paid_at),
            "notes": self.notes,
        }
        if include_breakdown:
            data["dailyBreakdown"] = [d.to_dict() for d in self.daily_breakdown]
        return data


@dataclass(frozen=True)
class PerformanceSummary:
    employee_id: int
    employee_number: str
    employee_name: str
    department: str
    period_start: date
    period_end: date
    period_label: str
    total_working_days: int
    present_days: int
    late_days: int
    absent_days: int
    leave_days: int
    total_hours_worked: float
    total_ot_hours: float
    attendance_rate: float
    punctuality_rate: float
    performance_score: int
    rating: Rating
    score_override: bool = False
    record_id: Optional[int] = None
    generated_by: Optional[int] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "empId": self.employee_id,
            "empNumber": self.employee_number,
            "empName": self.employee_name,
            "department": self.department,
            "periodStart": format_date(self.period_start),
            "periodEnd": format_date(self.period_end),
            "periodLabel": self.period_label,
            "totalWorkingDays": self.total_working_days,
            "presentDays": self.present_days,
            "lateDays": self.late_days,
            "absentDays": self.absent_days,
            "leaveDays": self.leave_days,
            "totalHoursWorked": round(self.total_hours_worked, 2),
            "totalOtHours": round(self.total_ot_hours, 2),
            "attendanceRate": self.attendance_rate,
            "punctualityRate": self.punctuality_rate,
            "performanceScore": self.performance_score,
            "rating": self.rating.value,
            "scoreOverride": self.score_override,
            "notes": self.notes,
        }
