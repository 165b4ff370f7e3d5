from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceEntry


class AttendanceRepository(Protocol):
    """Ledger store keyed by (employee_id, work_date).

    Soft-deleted entries are invisible to every read.
    """

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceEntry]:
        raise NotImplementedError

    def upsert(self, entry: AttendanceEntry) -> bool:
        """Insert or fully overwrite the entry for its key. Returns True if created."""

        raise NotImplementedError

    def upsert_leave_day(self, entry: AttendanceEntry) -> bool:
        """Leave-day upsert.

        Identity columns (employee snapshot, shift, rate) are written only on
        insert or when reviving a soft-deleted row; status, times, financials
        and metadata always. Returns True if created.
        """

        raise NotImplementedError

    def soft_delete(self, employee_id: int, work_date: date) -> bool:
        raise NotImplementedError
