from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Any, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import count_working_days, format_date
from ..common.validators import as_float, require_date_range
from ..core.constants import DEFAULT_TREND_PERIODS
from ..core.enums import Rating
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from .aggregation import AggregationEngine, group_by_employee
from .model import PerformanceSummary, round_half_up
from .repository import PerformanceRecordRepository

logger = logging.getLogger(__name__)


def rating_distribution(records: Sequence[PerformanceSummary]) -> list[dict]:
    counts = {r: 0 for r in Rating}
    for rec in records:
        counts[rec.rating] += 1
    total = len(records)
    return [
        {
            "rating": rating.value,
            "count": count,
            "percentage": int(round_half_up(count / total * 100)) if total else 0,
        }
        for rating, count in counts.items()
    ]


def department_averages(records: Sequence[PerformanceSummary]) -> list[dict]:
    scores: dict[str, list[int]] = defaultdict(list)
    for rec in records:
        scores[rec.department].append(rec.performance_score)

    data = [
        {"department": dept, "avgScore": int(round_half_up(sum(values) / len(values))), "count": len(values)}
        for dept, values in scores.items()
    ]
    data.sort(key=lambda d: d["avgScore"], reverse=True)
    return data


class PerformanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        records: PerformanceRecordRepository,
        *,
        engine: Optional[AggregationEngine] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._records = records
        self._engine = engine or AggregationEngine()

    def _live(self, start: date, end: date, *, department: Optional[str] = None) -> list[PerformanceSummary]:
        employees = list(self._employees.list_active(department=department))
        if not employees:
            return []

        entries = self._attendance.list_range(start=start, end=end, employee_ids=[e.employee_id for e in employees])
        by_employee = group_by_employee(entries)
        working_days = count_working_days(start, end)
        return [
            self._engine.performance(emp, by_employee.get(emp.employee_id, []), start, end, working_days=working_days)
            for emp in employees
        ]

    def calculate(self, from_value: Any, to_value: Any, *, actor_id: Optional[int]) -> dict:
        """Idempotent refresh; rows with an admin score override are skipped."""

        start, end = require_date_range(from_value, to_value, start_name="startDate", end_name="endDate")
        created = updated = skipped = 0

        for summary in self._live(start, end):
            existing = self._records.get_for_period(summary.employee_id, start, end)
            if existing and existing.score_override:
                skipped += 1
                continue
            if self._records.save(replace(summary, generated_by=actor_id)):
                created += 1
            else:
                updated += 1

        logger.info(
            "Performance %s..%s calculated by %s: created=%s updated=%s skipped=%s",
            start.isoformat(),
            end.isoformat(),
            actor_id,
            created,
            updated,
            skipped,
        )
        return {
            "message": f"Performance calculated: {created} created, {updated} updated, {skipped} skipped (manual override)",
            "created": created,
            "updated": updated,
            "skipped": skipped,
            "periodStart": format_date(start),
            "periodEnd": format_date(end),
        }

    def summary(self, from_value: Any, to_value: Any, *, department: Optional[str] = None) -> dict:
        start, end = require_date_range(from_value, to_value, start_name="startDate", end_name="endDate")

        records = list(self._records.list_overlapping(start, end, department=department))
        if not records:
            records = self._live(start, end, department=department)

        distribution = rating_distribution(records)
        counts = {d["rating"]: d["count"] for d in distribution}
        avg = int(round_half_up(sum(r.performance_score for r in records) / len(records))) if records else 0

        return {
            "periodStart": format_date(start),
            "periodEnd": format_date(end),
            "table": [r.to_dict() for r in records],
            "pieData": distribution,
            "deptData": department_averages(records),
            "stats": {
                "totalEmployees": len(records),
                "avgScore": avg,
                "excellent": counts[Rating.EXCELLENT.value],
                "good": counts[Rating.GOOD.value],
                "average": counts[Rating.AVERAGE.value],
                "poor": counts[Rating.POOR.value],
            },
            "total": len(records),
        }

    def detail(self, employee_id: int, from_value: Any, to_value: Any, *, trend_periods: int = DEFAULT_TREND_PERIODS) -> dict:
        start, end = require_date_range(from_value, to_value, start_name="startDate", end_name="endDate")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        record = self._records.find_overlapping_for_employee(employee.employee_id, start, end)
        if record is None:
            entries = self._attendance.list_range(start=start, end=end, employee_ids=[employee.employee_id])
            record = self._engine.performance(employee, entries, start, end)

        trend = list(self._records.list_recent_for_employee(employee.employee_id, trend_periods))
        trend.reverse()

        return {
            "employee": {
                "id": employee.employee_id,
                "empNumber": employee.employee_number,
                "empName": employee.full_name,
                "department": employee.department,
                "shift": employee.shift.to_dict(),
            },
            "performance": record.to_dict(),
            "trendData": [
                {
                    "periodLabel": t.period_label,
                    "periodStart": format_date(t.period_start),
                    "performanceScore": t.performance_score,
                    "attendanceRate": t.attendance_rate,
                    "punctualityRate": t.punctuality_rate,
                    "rating": t.rating.value,
                }
                for t in trend
            ],
        }

    def override_score(self, record_id: int, score_value: Any, *, notes: Optional[str] = None) -> PerformanceSummary:
        score = as_float(score_value, default=-1)
        if score_value is None or not 0 <= score <= 100:
            raise ValidationError("score must be a number between 0 and 100")

        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFoundError("Performance record not found")

        score_int = int(round_half_up(score))
        rating = self._engine.policy.rating_for(score_int)
        self._records.override_score(record_id, score=score_int, rating=rating, notes=notes)
        logger.info("Performance record %s score overridden to %s", record_id, score_int)
        return replace(
            record,
            performance_score=score_int,
            rating=rating,
            score_override=True,
            notes=notes if notes is not None else record.notes,
        )
