from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus, EntrySource, Ownership
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json_list, normalize_mysql_hhmm
from ..shifts.model import ShiftPolicy
from .model import AttendanceEntry, DeductionItem, EntryMetadata, Financials, OtItem
from .repository import AttendanceRepository

_COLUMNS = """
    entry_id, employee_id, work_date, employee_number, employee_name, department,
    shift_start, shift_end, hourly_rate, status, in_time, out_time, out_next_day,
    hours_worked, scheduled_hours, base_pay, deduction, deduction_details,
    ot_multiplier, ot_hours, ot_amount, ot_details, final_day_earning,
    ownership, source, last_updated_by, last_modified_at, csv_import_batch, notes,
    is_deleted
"""

_IDENTITY_FIELDS = ("employee_number", "employee_name", "department", "shift_start", "shift_end", "hourly_rate")

_STATE_FIELDS = (
    "status",
    "in_time",
    "out_time",
    "out_next_day",
    "hours_worked",
    "scheduled_hours",
    "base_pay",
    "deduction",
    "deduction_details",
    "ot_multiplier",
    "ot_hours",
    "ot_amount",
    "ot_details",
    "final_day_earning",
    "ownership",
    "source",
    "last_updated_by",
    "last_modified_at",
    "csv_import_batch",
    "notes",
)


def _row_to_entry(r: dict) -> AttendanceEntry:
    financials = Financials(
        hours_worked=float(r.get("hours_worked") or 0),
        scheduled_hours=float(r.get("scheduled_hours") or 0),
        base_pay=float(r.get("base_pay") or 0),
        deduction=float(r.get("deduction") or 0),
        deduction_details=tuple(DeductionItem.from_dict(d) for d in load_json_list(r.get("deduction_details"))),
        ot_multiplier=float(r.get("ot_multiplier") or 1),
        ot_hours=float(r.get("ot_hours") or 0),
        ot_amount=float(r.get("ot_amount") or 0),
        ot_details=tuple(OtItem.from_dict(o) for o in load_json_list(r.get("ot_details"))),
        final_day_earning=float(r.get("final_day_earning") or 0),
    )
    return AttendanceEntry(
        entry_id=int(r["entry_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        employee_number=str(r.get("employee_number") or ""),
        employee_name=r.get("employee_name") or "",
        department=r.get("department") or "",
        shift=ShiftPolicy(start=normalize_mysql_hhmm(r["shift_start"]), end=normalize_mysql_hhmm(r["shift_end"])),
        hourly_rate=float(r.get("hourly_rate") or 0),
        status=AttendanceStatus(r["status"]),
        in_time=normalize_mysql_hhmm(r.get("in_time")),
        out_time=normalize_mysql_hhmm(r.get("out_time")),
        out_next_day=bool(r.get("out_next_day")),
        financials=financials,
        ownership=Ownership(r.get("ownership") or Ownership.SYSTEM.value),
        metadata=EntryMetadata(
            source=EntrySource(r.get("source") or EntrySource.SYSTEM.value),
            last_updated_by=r.get("last_updated_by"),
            last_modified_at=r.get("last_modified_at"),
            csv_import_batch=r.get("csv_import_batch"),
            notes=r.get("notes"),
        ),
        is_deleted=bool(r.get("is_deleted")),
    )


def _entry_to_row(e: AttendanceEntry) -> dict:
    f = e.financials
    return {
        "employee_id": e.employee_id,
        "work_date": e.work_date,
        "employee_number": e.employee_number,
        "employee_name": e.employee_name,
        "department": e.department,
        "shift_start": e.shift.start,
        "shift_end": e.shift.end,
        "hourly_rate": e.hourly_rate,
        "status": e.status.value,
        "in_time": e.in_time,
        "out_time": e.out_time,
        "out_next_day": 1 if e.out_next_day else 0,
        "hours_worked": f.hours_worked,
        "scheduled_hours": f.scheduled_hours,
        "base_pay": f.base_pay,
        "deduction": f.deduction,
        "deduction_details": dump_json([d.to_dict() for d in f.deduction_details]),
        "ot_multiplier": f.ot_multiplier,
        "ot_hours": f.ot_hours,
        "ot_amount": f.ot_amount,
        "ot_details": dump_json([o.to_dict() for o in f.ot_details]),
        "final_day_earning": f.final_day_earning,
        "ownership": e.ownership.value,
        "source": e.metadata.source.value,
        "last_updated_by": e.metadata.last_updated_by,
        "last_modified_at": e.metadata.last_modified_at,
        "csv_import_batch": e.metadata.csv_import_batch,
        "notes": e.metadata.notes,
    }


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_entries
                WHERE employee_id=%s AND work_date=%s AND is_deleted=0
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceEntry]:
        clauses = ["work_date BETWEEN %s AND %s", "is_deleted=0"]
        params: list[object] = [start, end]

        if employee_ids is not None:
            ids = sorted({int(i) for i in employee_ids})
            if not ids:
                return []
            clauses.append(f"employee_id IN ({','.join(['%s'] * len(ids))})")
            params.extend(ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_entries
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date ASC, employee_number ASC
                """,
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def _upsert(
        self,
        entry: AttendanceEntry,
        update_fields: Sequence[str],
        revive_fields: Sequence[str] = (),
    ) -> bool:
        row = _entry_to_row(entry)
        columns = list(row.keys())
        # revive_fields are only taken over a soft-deleted row; must precede is_deleted=0.
        assignments = [f"{c}=IF(is_deleted=1, VALUES({c}), {c})" for c in revive_fields]
        assignments += [f"{c}=VALUES({c})" for c in update_fields]
        updates = ", ".join(assignments)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_entries ({", ".join(columns)})
                VALUES ({", ".join(["%s"] * len(columns))})
                ON DUPLICATE KEY UPDATE {updates}, is_deleted=0
                """,
                tuple(row[c] for c in columns),
            )
            # MySQL reports 1 affected row for an insert, 2 for an update.
            return cur.rowcount == 1

    def upsert(self, entry: AttendanceEntry) -> bool:
        return self._upsert(entry, _IDENTITY_FIELDS + _STATE_FIELDS)

    def upsert_leave_day(self, entry: AttendanceEntry) -> bool:
        return self._upsert(entry, _STATE_FIELDS, revive_fields=_IDENTITY_FIELDS)

    def soft_delete(self, employee_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_entries SET is_deleted=1 WHERE employee_id=%s AND work_date=%s AND is_deleted=0",
                (int(employee_id), work_date),
            )
            return cur.rowcount > 0
