from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import CorrectionScope, LeaveType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_hhmm
from .model import CorrectionRequest, LeaveRequest
from .repository import RequestRepository

_LEAVE_COLUMNS = """
    request_id, employee_id, employee_number, employee_name, leave_type,
    from_date, to_date, reason, status, created_at, decided_by, decided_at, rejection_reason
"""

_CORRECTION_COLUMNS = """
    request_id, employee_id, employee_number, employee_name, work_date, scope,
    original_in_time, corrected_in_time, original_out_time, corrected_out_time,
    reason, status, created_at, decided_by, decided_at, rejection_reason
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        employee_number=str(r.get("employee_number") or ""),
        employee_name=r.get("employee_name") or "",
        leave_type=LeaveType(r["leave_type"]),
        from_date=r["from_date"],
        to_date=r["to_date"],
        reason=r.get("reason") or "",
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        rejection_reason=r.get("rejection_reason"),
    )


def _row_to_correction(r: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        employee_number=str(r.get("employee_number") or ""),
        employee_name=r.get("employee_name") or "",
        work_date=r["work_date"],
        scope=CorrectionScope(r["scope"]),
        original_in_time=normalize_mysql_hhmm(r.get("original_in_time")),
        corrected_in_time=normalize_mysql_hhmm(r.get("corrected_in_time")),
        original_out_time=normalize_mysql_hhmm(r.get("original_out_time")),
        corrected_out_time=normalize_mysql_hhmm(r.get("corrected_out_time")),
        reason=r.get("reason") or "",
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        rejection_reason=r.get("rejection_reason"),
    )


def _filters(
    status: Optional[RequestStatus],
    employee_id: Optional[int],
    created_since: Optional[datetime],
) -> tuple[str, list[object]]:
    clauses = ["is_deleted=0"]
    params: list[object] = []
    if status is not None:
        clauses.append("status=%s")
        params.append(status.value)
    if employee_id is not None:
        clauses.append("employee_id=%s")
        params.append(int(employee_id))
    if created_since is not None:
        clauses.append("created_at>=%s")
        params.append(created_since)
    return " AND ".join(clauses), params


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Leave requests --------
    def create_leave(
        self,
        *,
        employee_id: int,
        employee_number: str,
        employee_name: str,
        leave_type: LeaveType,
        from_date: date,
        to_date: date,
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, employee_number, employee_name, leave_type, from_date, to_date, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    employee_number,
                    employee_name,
                    leave_type.value,
                    from_date,
                    to_date,
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE request_id=%s AND is_deleted=0",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def has_overlapping_pending_leave(self, *, employee_id: int, from_date: date, to_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 FROM leave_requests
                WHERE employee_id=%s AND status=%s AND from_date<=%s AND to_date>=%s AND is_deleted=0
                LIMIT 1
                """,
                (int(employee_id), RequestStatus.PENDING.value, to_date, from_date),
            )
            return fetchone(cur) is not None

    def list_leave_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        created_since: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        where, params = _filters(status, employee_id, created_since)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def decide_leave(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=NOW(), rejection_reason=%s
                WHERE request_id=%s AND status=%s AND is_deleted=0
                """,
                (status.value, int(decided_by), rejection_reason, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    # -------- Correction requests --------
    def create_correction(
        self,
        *,
        employee_id: int,
        employee_number: str,
        employee_name: str,
        work_date: date,
        scope: CorrectionScope,
        original_in_time: Optional[str],
        corrected_in_time: Optional[str],
        original_out_time: Optional[str],
        corrected_out_time: Optional[str],
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO correction_requests(
                    employee_id, employee_number, employee_name, work_date, scope,
                    original_in_time, corrected_in_time, original_out_time, corrected_out_time,
                    reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    employee_number,
                    employee_name,
                    work_date,
                    scope.value,
                    original_in_time,
                    corrected_in_time,
                    original_out_time,
                    corrected_out_time,
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_correction(self, *, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_CORRECTION_COLUMNS} FROM correction_requests WHERE request_id=%s AND is_deleted=0",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _row_to_correction(r) if r else None

    def has_pending_correction(self, *, employee_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 FROM correction_requests
                WHERE employee_id=%s AND work_date=%s AND status=%s AND is_deleted=0
                LIMIT 1
                """,
                (int(employee_id), work_date, RequestStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def list_correction_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        created_since: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        where, params = _filters(status, employee_id, created_since)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CORRECTION_COLUMNS}
                FROM correction_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_correction(r) for r in fetchall(cur)]

    def decide_correction(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE correction_requests
                SET status=%s, decided_by=%s, decided_at=NOW(), rejection_reason=%s
                WHERE request_id=%s AND status=%s AND is_deleted=0
                """,
                (status.value, int(decided_by), rejection_reason, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0
