from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..common.datetime_utils import format_date
from ..core.constants import CSV_MIMETYPES, MAX_CSV_BYTES, PUNCH_WINDOW_HOURS
from ..core.enums import LogType, PairingMode
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeDirectory
from .csv_parser import PunchGroup, group_by_employee_and_date, parse_punch_csv
from .model import Financials
from .pairing import PunchPair, merge_typed_punches, pair_punches
from .reconciler import AttendanceReconciler, WriteOutcome

logger = logging.getLogger(__name__)


class ImportStatus(str, Enum):
    COMPLETE = "complete"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class ImportSummary:
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    records_created: int = 0
    records_updated: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "skipped": self.skipped,
            "recordsCreated": self.records_created,
            "recordsUpdated": self.records_updated,
        }


@dataclass
class ImportReport:
    status: ImportStatus = ImportStatus.COMPLETE
    message: str = "CSV import complete"
    batch_id: Optional[str] = None
    log: list[dict] = field(default_factory=list)
    summary: ImportSummary = field(default_factory=ImportSummary)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ImportStatus.COMPLETE

    def add(self, kind: LogType, message: str) -> None:
        self.log.append({"type": kind.value, "message": message})

    def to_dict(self, *, include_error: bool = False) -> dict:
        data = {
            "success": self.success,
            "message": self.message,
            "batchId": self.batch_id,
            "processingLog": list(self.log),
            "summary": self.summary.to_dict(),
        }
        if include_error and self.error:
            data["error"] = self.error
        return data


def size_limit_message(max_bytes: int) -> str:
    return f"File size exceeds {max_bytes // (1024 * 1024)}MB limit"


def validate_upload(
    *,
    filename: Optional[str],
    mimetype: Optional[str],
    size: Optional[int],
    max_bytes: int = MAX_CSV_BYTES,
) -> None:
    if filename is None and size is None:
        raise ValidationError("No CSV file provided")

    is_csv = (mimetype or "") in CSV_MIMETYPES or (filename or "").lower().endswith(".csv")
    if not is_csv:
        raise ValidationError("Invalid file type. Please upload a CSV file.")

    if size is not None and size > max_bytes:
        raise ValidationError(size_limit_message(max_bytes))

    if not size:
        raise ValidationError("CSV file is empty")


def _money_line(f: Financials) -> str:
    return (
        f"Hours: {f.hours_worked:.2f} | Base: {f.base_pay:.2f} | OT: {f.ot_amount:.2f} | Final: {f.final_day_earning:.2f}"
    )


class CsvImportService:
    """Parse, pair and reconcile a punch CSV in one synchronous pass."""

    def __init__(
        self,
        employees: EmployeeDirectory,
        reconciler: AttendanceReconciler,
        *,
        pairing_mode: PairingMode = PairingMode.WINDOW,
        window_hours: float = PUNCH_WINDOW_HOURS,
        batch_id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._employees = employees
        self._reconciler = reconciler
        self._pairing_mode = PairingMode(pairing_mode)
        self._window_hours = window_hours
        self._batch_id_factory = batch_id_factory

    def _pair(self, shift_start: str, group: PunchGroup) -> PunchPair:
        if self._pairing_mode == PairingMode.TYPED:
            return merge_typed_punches(shift_start, group.rows)
        return pair_punches(shift_start, group.punch_times, window_hours=self._window_hours)

    def import_csv(
        self,
        content: Optional[str],
        *,
        filename: Optional[str] = None,
        size: Optional[int] = None,
        actor_id: Optional[int] = None,
    ) -> ImportReport:
        report = ImportReport(batch_id=self._batch_id_factory())
        summary = report.summary

        try:
            report.add(LogType.INFO, f"File: {filename or 'upload'} ({size if size is not None else '?'} bytes)")

            parsed = parse_punch_csv(content)
            for err in parsed.errors:
                report.add(LogType.ERROR, err.message())

            summary.total = len(parsed.parsed)
            summary.failed = len(parsed.errors)

            if not parsed.parsed:
                report.status = ImportStatus.EMPTY
                report.message = "No valid rows found in CSV file"
                return report

            report.add(LogType.INFO, f"Parsed {len(parsed.parsed)} valid row(s)")

            groups = group_by_employee_and_date(parsed.parsed)
            directory = {e.employee_number.upper(): e for e in self._employees.list_by_numbers({g.employee_number for g in groups})}
            report.add(LogType.INFO, f"{len(groups)} employee-date group(s)")

            for group in groups:
                self._import_group(group, directory, report, actor_id)

            report.add(
                LogType.SUMMARY,
                f"DONE: Rows: {summary.total} | OK: {summary.success} | Skipped: {summary.skipped} | "
                f"Errors: {summary.failed} | Created: {summary.records_created} | Updated: {summary.records_updated}",
            )
            logger.info("CSV import %s finished: %s", report.batch_id, summary.to_dict())
            return report
        except Exception as e:
            logger.exception("CSV import %s aborted", report.batch_id)
            report.status = ImportStatus.FAILED
            report.message = "Error processing CSV file"
            report.error = str(e)
            report.add(LogType.ERROR, f"Fatal: {e}")
            return report

    def _import_group(self, group: PunchGroup, directory: dict, report: ImportReport, actor_id: Optional[int]) -> None:
        summary = report.summary
        rows = len(group.rows)
        day_label = format_date(group.work_date)

        report.add(LogType.INFO, f"{group.employee_number} ({group.first_name} {group.last_name}) - {day_label}")

        employee = directory.get(group.employee_number)
        if employee is None:
            logger.warning("CSV import: unknown employee %s", group.employee_number)
            report.add(LogType.WARN, f"Employee #{group.employee_number} not found. Skipped.")
            summary.skipped += rows
            return

        try:
            pair = self._pair(employee.shift.start, group)
            if pair.in_time:
                report.add(LogType.INFO, f"In:  {pair.in_time}")
            if pair.out_time:
                report.add(LogType.INFO, f"Out: {pair.out_time}{' (next day)' if pair.out_next_day else ''}")

            result = self._reconciler.record_csv_day(
                employee,
                group.work_date,
                pair,
                actor_id=actor_id,
                batch_id=report.batch_id,
            )
        except Exception as e:
            logger.exception("CSV import: write failed for %s on %s", group.employee_number, day_label)
            report.add(LogType.ERROR, f"DB error: {e}")
            summary.failed += rows
            return

        if result.outcome == WriteOutcome.SKIPPED:
            report.add(LogType.WARN, "Skipped: record has manual override. Use save-row to update.")
            summary.skipped += rows
            return

        entry = result.entry
        report.add(LogType.INFO, f"{_money_line(entry.financials)} | Status: {entry.status.value}")
        if result.outcome == WriteOutcome.CREATED:
            summary.records_created += 1
            report.add(LogType.SUCCESS, f"Created ({entry.status.value})")
        else:
            summary.records_updated += 1
            report.add(LogType.SUCCESS, f"Updated ({entry.status.value})")
        summary.success += rows
