"""Period roll-ups of ledger entries into payroll and performance summaries.

Pure: callers load the entries, the engine only counts and sums. Running it
twice over the same entries gives the same summary.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceEntry
from ..common.datetime_utils import count_working_days, period_label
from ..core.enums import AttendanceStatus, SalaryType
from ..core.policy import ScoringPolicy
from ..employees.model import Employee
from .model import DailyBreakdown, PayrollSummary, PerformanceSummary, round_half_up


@dataclass(frozen=True)
class DayCounts:
    present_days: int = 0
    late_days: int = 0
    absent_days: int = 0
    leave_days: int = 0
    total_hours_worked: float = 0.0
    total_ot_hours: float = 0.0
    total_base_pay: float = 0.0
    total_deduction: float = 0.0
    total_ot_amount: float = 0.0


def count_days(entries: Iterable[AttendanceEntry]) -> DayCounts:
    """Present counts Present and Late days; Late is also counted on its own."""

    present = late = absent = leave = 0
    hours = ot_hours = base = deduction = ot_amount = 0.0

    for e in entries:
        if e.is_deleted:
            continue
        if e.status == AttendanceStatus.PRESENT:
            present += 1
        elif e.status == AttendanceStatus.LATE:
            present += 1
            late += 1
        elif e.status == AttendanceStatus.ABSENT:
            absent += 1
        elif e.status == AttendanceStatus.LEAVE:
            leave += 1

        f = e.financials
        hours += f.hours_worked or 0
        ot_hours += f.ot_hours or 0
        base += f.base_pay or 0
        deduction += f.deduction or 0
        ot_amount += f.ot_amount or 0

    return DayCounts(
        present_days=present,
        late_days=late,
        absent_days=absent,
        leave_days=leave,
        total_hours_worked=hours,
        total_ot_hours=ot_hours,
        total_base_pay=base,
        total_deduction=deduction,
        total_ot_amount=ot_amount,
    )


def group_by_employee(entries: Iterable[AttendanceEntry]) -> dict[int, list[AttendanceEntry]]:
    grouped: dict[int, list[AttendanceEntry]] = defaultdict(list)
    for e in entries:
        grouped[e.employee_id].append(e)
    return grouped


def daily_breakdown(entries: Iterable[AttendanceEntry]) -> tuple[DailyBreakdown, ...]:
    return tuple(
        DailyBreakdown(
            work_date=e.work_date,
            status=e.status,
            in_time=e.in_time,
            out_time=e.out_time,
            hours_worked=e.financials.hours_worked,
            base_pay=e.financials.base_pay,
            deduction=e.financials.deduction,
            ot_hours=e.financials.ot_hours,
            ot_amount=e.financials.ot_amount,
            final_day_earning=e.financials.final_day_earning,
        )
        for e in sorted(entries, key=lambda x: x.work_date)
        if not e.is_deleted
    )


class AggregationEngine:
    def __init__(self, *, policy: Optional[ScoringPolicy] = None):
        self._policy = policy or ScoringPolicy()

    @property
    def policy(self) -> ScoringPolicy:
        return self._policy

    def payroll(
        self,
        employee: Employee,
        entries: Sequence[AttendanceEntry],
        start: date,
        end: date,
        *,
        working_days: Optional[int] = None,
    ) -> PayrollSummary:
        counts = count_days(entries)
        twd = count_working_days(start, end) if working_days is None else working_days

        if employee.salary_type == SalaryType.MONTHLY:
            paid_days = counts.present_days + counts.leave_days
            base_salary = (employee.monthly_salary or 0) * paid_days / max(1, twd)
        else:
            base_salary = counts.total_base_pay

        net_salary = max(0.0, base_salary - counts.total_deduction + counts.total_ot_amount)

        return PayrollSummary(
            employee_id=employee.employee_id,
            employee_number=employee.employee_number,
            employee_name=employee.full_name,
            department=employee.department,
            period_start=start,
            period_end=end,
            period_label=period_label(start),
            salary_type=employee.salary_type,
            total_working_days=twd,
            present_days=counts.present_days,
            late_days=counts.late_days,
            absent_days=counts.absent_days,
            leave_days=counts.leave_days,
            total_hours_worked=counts.total_hours_worked,
            base_salary=base_salary,
            total_deduction=counts.total_deduction,
            total_ot_hours=counts.total_ot_hours,
            total_ot_amount=counts.total_ot_amount,
            net_salary=net_salary,
            daily_breakdown=daily_breakdown(entries),
        )

    def performance(
        self,
        employee: Employee,
        entries: Sequence[AttendanceEntry],
        start: date,
        end: date,
        *,
        working_days: Optional[int] = None,
    ) -> PerformanceSummary:
        p = self._policy
        counts = count_days(entries)
        twd = count_working_days(start, end) if working_days is None else working_days
        denominator = twd or 1

        attendance_rate = min(100.0, (counts.present_days + counts.leave_days) / denominator * 100)
        if counts.present_days > 0:
            on_time = max(0, counts.present_days - counts.late_days)
            punctuality_rate = on_time / counts.present_days * 100
        else:
            punctuality_rate = 100.0
        saturation = max(1, denominator) * p.ot_saturation_hours_per_day
        ot_score = min(100.0, counts.total_ot_hours / saturation * 100)

        score = int(
            round_half_up(
                attendance_rate * p.attendance_weight + punctuality_rate * p.punctuality_weight + ot_score * p.ot_weight
            )
        )

        return PerformanceSummary(
            employee_id=employee.employee_id,
            employee_number=employee.employee_number,
            employee_name=employee.full_name,
            department=employee.department,
            period_start=start,
            period_end=end,
            period_label=period_label(start),
            total_working_days=twd,
            present_days=counts.present_days,
            late_days=counts.late_days,
            absent_days=counts.absent_days,
            leave_days=counts.leave_days,
            total_hours_worked=counts.total_hours_worked,
            total_ot_hours=counts.total_ot_hours,
            attendance_rate=round_half_up(attendance_rate, 1),
            punctuality_rate=round_half_up(punctuality_rate, 1),
            performance_score=score,
            rating=p.rating_for(score),
        )
