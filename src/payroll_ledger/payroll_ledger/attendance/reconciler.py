"""Single writer for ledger entries.

Every write path (CSV import, manual save, leave approval, correction
approval) goes through AttendanceReconciler so the ownership lock is checked
in one place and financials always come from FinancialCalculator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import iter_days, now_local
from ..common.time_utils import to_minutes
from ..core.enums import AttendanceStatus, CorrectionScope, EntrySource, Ownership
from ..employees.model import Employee
from ..payroll.calculator.financial_calculator import FinancialCalculator
from .factory import derive_status
from .inputs import ManualEdit
from .model import AttendanceEntry, EntryMetadata, Financials
from .pairing import PunchPair
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Sources that must leave a human-locked entry alone.
_LOCK_RESPECTING_SOURCES = frozenset({EntrySource.CSV, EntrySource.SYSTEM})


class WriteOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WriteResult:
    outcome: WriteOutcome
    entry: Optional[AttendanceEntry]


@dataclass
class BulkResult:
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def saved(self) -> int:
        return self.created + self.updated


def is_writable_by(existing: Optional[AttendanceEntry], source: EntrySource) -> bool:
    if existing is None or existing.ownership == Ownership.SYSTEM:
        return True
    return source not in _LOCK_RESPECTING_SOURCES


def _wraps_midnight(in_time: Optional[str], out_time: Optional[str]) -> bool:
    return bool(in_time and out_time and to_minutes(out_time) < to_minutes(in_time))


class AttendanceReconciler:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[FinancialCalculator] = None,
        clock: Callable = now_local,
    ):
        self._attendance = attendance
        self._calculator = calculator or FinancialCalculator()
        self._clock = clock

    def _metadata(self, source: EntrySource, actor_id: Optional[int], **extra) -> EntryMetadata:
        return EntryMetadata(source=source, last_updated_by=actor_id, last_modified_at=self._clock(), **extra)

    @staticmethod
    def _snapshot(employee: Employee, work_date: date) -> AttendanceEntry:
        """New entry carrying the employee's current shift and rate."""
        return AttendanceEntry(
            employee_id=employee.employee_id,
            work_date=work_date,
            employee_number=employee.employee_number,
            employee_name=employee.full_name,
            department=employee.department,
            shift=employee.shift,
            hourly_rate=employee.hourly_rate,
        )

    def _write(self, entry: AttendanceEntry) -> WriteOutcome:
        created = self._attendance.upsert(entry)
        return WriteOutcome.CREATED if created else WriteOutcome.UPDATED

    # CSV import

    def record_csv_day(
        self,
        employee: Employee,
        work_date: date,
        pair: PunchPair,
        *,
        actor_id: Optional[int] = None,
        batch_id: Optional[str] = None,
    ) -> WriteResult:
        existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if not is_writable_by(existing, EntrySource.CSV):
            logger.warning(
                "CSV skipped %s on %s: entry is human-locked", employee.employee_number, work_date.isoformat()
            )
            return WriteResult(outcome=WriteOutcome.SKIPPED, entry=existing)

        status = derive_status(in_time=pair.in_time, out_time=pair.out_time, shift=employee.shift)
        financials = self._calculator.compute(
            status=status,
            in_time=pair.in_time,
            out_time=pair.out_time,
            out_next_day=pair.out_next_day,
            shift=employee.shift,
            hourly_rate=employee.hourly_rate,
        )

        entry = replace(
            self._snapshot(employee, work_date),
            entry_id=existing.entry_id if existing else None,
            status=status,
            in_time=pair.in_time,
            out_time=pair.out_time,
            out_next_day=pair.out_next_day,
            financials=financials,
            ownership=Ownership.SYSTEM,
            metadata=self._metadata(EntrySource.CSV, actor_id, csv_import_batch=batch_id),
        )
        return WriteResult(outcome=self._write(entry), entry=entry)

    # Manual save

    def save_manual(self, edit: ManualEdit, employee: Employee, *, actor_id: Optional[int]) -> WriteResult:
        """Admin edit. Always overwrites and leaves the entry human-locked."""

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, edit.work_date)

        if edit.status in (AttendanceStatus.LEAVE, AttendanceStatus.ABSENT):
            status = edit.status
        else:
            status = derive_status(in_time=edit.in_time, out_time=edit.out_time, shift=employee.shift)

        financials = self._calculator.compute(
            status=status,
            in_time=edit.in_time,
            out_time=edit.out_time,
            out_next_day=edit.out_next_day,
            shift=employee.shift,
            hourly_rate=employee.hourly_rate,
            ot=edit.ot,
            deduction=edit.deduction,
        )

        entry = replace(
            self._snapshot(employee, edit.work_date),
            entry_id=existing.entry_id if existing else None,
            status=status,
            in_time=edit.in_time,
            out_time=edit.out_time,
            out_next_day=edit.out_next_day,
            financials=financials,
            ownership=Ownership.HUMAN_LOCKED,
            metadata=self._metadata(EntrySource.MANUAL, actor_id),
        )
        outcome = self._write(entry)
        logger.info(
            "Manual save %s on %s by %s (%s)",
            employee.employee_number,
            edit.work_date.isoformat(),
            actor_id,
            outcome.value,
        )
        return WriteResult(outcome=outcome, entry=entry)

    def save_manual_batch(
        self,
        edits: Sequence[tuple[ManualEdit, Employee]],
        *,
        actor_id: Optional[int],
    ) -> BulkResult:
        """One upsert per row; no rollback, the caller gets counts."""

        result = BulkResult()
        for edit, employee in edits:
            try:
                written = self.save_manual(edit, employee, actor_id=actor_id)
            except Exception as e:
                logger.exception("Batch save failed for %s on %s", employee.employee_number, edit.work_date)
                result.failed += 1
                result.errors.append(f"{employee.employee_number} {edit.work_date.isoformat()}: {e}")
                continue
            if written.outcome == WriteOutcome.CREATED:
                result.created += 1
            else:
                result.updated += 1
        return result

    # Leave approval

    def apply_leave(
        self,
        employee: Employee,
        start: date,
        end: date,
        *,
        actor_id: Optional[int],
    ) -> BulkResult:
        """Write a fully paid Leave day for every calendar day in [start, end]."""

        result = BulkResult()
        for day in iter_days(start, end):
            try:
                existing = self._attendance.get_for_employee_and_date(employee.employee_id, day)
                base = existing or self._snapshot(employee, day)

                financials = self._calculator.compute(
                    status=AttendanceStatus.LEAVE,
                    in_time=None,
                    out_time=None,
                    shift=base.shift,
                    hourly_rate=base.hourly_rate,
                )
                entry = replace(
                    base,
                    status=AttendanceStatus.LEAVE,
                    in_time=None,
                    out_time=None,
                    out_next_day=False,
                    financials=financials,
                    ownership=existing.ownership if existing else Ownership.SYSTEM,
                    metadata=self._metadata(EntrySource.LEAVE_APPROVAL, actor_id),
                    is_deleted=False,
                )
                created = self._attendance.upsert_leave_day(entry)
            except Exception as e:
                logger.exception("Leave day write failed for %s on %s", employee.employee_number, day.isoformat())
                result.failed += 1
                result.errors.append(f"{day.isoformat()}: {e}")
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1

        logger.info(
            "Leave applied for %s %s..%s: created=%s updated=%s failed=%s",
            employee.employee_number,
            start.isoformat(),
            end.isoformat(),
            result.created,
            result.updated,
            result.failed,
        )
        return result

    # Correction approval

    def apply_correction(
        self,
        employee: Employee,
        work_date: date,
        *,
        scope: CorrectionScope,
        in_time: Optional[str],
        out_time: Optional[str],
        actor_id: Optional[int],
    ) -> AttendanceEntry:
        """Patch the in and/or out time named by scope.

        Hours and base pay are recomputed from the corrected times; recorded
        deduction and OT amounts are kept.
        """

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        base = existing or replace(
            self._snapshot(employee, work_date),
            financials=Financials.zero(scheduled_hours=employee.shift.scheduled_hours),
        )

        new_in = in_time if scope in (CorrectionScope.IN, CorrectionScope.BOTH) else base.in_time
        new_out = out_time if scope in (CorrectionScope.OUT, CorrectionScope.BOTH) else base.out_time
        out_next_day = _wraps_midnight(new_in, new_out)

        status = derive_status(in_time=new_in, out_time=new_out, shift=base.shift)
        financials = self._calculator.recompute_base(
            base.financials,
            status=status,
            in_time=new_in,
            out_time=new_out,
            out_next_day=out_next_day,
            shift=base.shift,
            hourly_rate=base.hourly_rate,
        )

        entry = replace(
            base,
            status=status,
            in_time=new_in,
            out_time=new_out,
            out_next_day=out_next_day,
            financials=financials,
            metadata=self._metadata(EntrySource.CORRECTION_APPROVAL, actor_id),
        )
        self._attendance.upsert(entry)
        logger.info("Correction applied for %s on %s (%s)", employee.employee_number, work_date.isoformat(), scope.value)
        return entry
