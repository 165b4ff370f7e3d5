from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollStatus, Rating
from .model import PayrollSummary, PerformanceSummary


class PayrollRecordRepository(Protocol):
    """Stored payroll summaries, unique per (employee_id, period_start, period_end)."""

    def get_by_id(self, record_id: int) -> Optional[PayrollSummary]:
        raise NotImplementedError

    def get_for_period(self, employee_id: int, start: date, end: date) -> Optional[PayrollSummary]:
        raise NotImplementedError

    def list_for_period(self, start: date, end: date, *, department: Optional[str] = None) -> Sequence[PayrollSummary]:
        raise NotImplementedError

    def save(self, summary: PayrollSummary) -> bool:
        """Upsert by period key. Returns True if created."""

        raise NotImplementedError

    def update_status(
        self,
        record_id: int,
        *,
        status: PayrollStatus,
        actor_id: Optional[int],
        at: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError


class PerformanceRecordRepository(Protocol):
    """Stored performance summaries, unique per (employee_id, period_start, period_end)."""

    def get_by_id(self, record_id: int) -> Optional[PerformanceSummary]:
        raise NotImplementedError

    def get_for_period(self, employee_id: int, start: date, end: date) -> Optional[PerformanceSummary]:
        raise NotImplementedError

    def list_overlapping(self, start: date, end: date, *, department: Optional[str] = None) -> Sequence[PerformanceSummary]:
        """Records whose period intersects [start, end]."""

        raise NotImplementedError

    def find_overlapping_for_employee(self, employee_id: int, start: date, end: date) -> Optional[PerformanceSummary]:
        raise NotImplementedError

    def list_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[PerformanceSummary]:
        """Newest period first."""

        raise NotImplementedError

    def save(self, summary: PerformanceSummary) -> bool:
        """Upsert by period key. Returns True if created."""

        raise NotImplementedError

    def override_score(self, record_id: int, *, score: int, rating: Rating, notes: Optional[str]) -> bool:
        raise NotImplementedError
