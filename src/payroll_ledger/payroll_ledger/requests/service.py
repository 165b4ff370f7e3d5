from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Callable, Optional

from ..attendance.reconciler import AttendanceReconciler
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.time_utils import normalize_time
from ..common.validators import require_date, require_date_range, require_non_empty
from ..core.actor import Actor
from ..core.constants import LEAVE_ELIGIBILITY_DAYS, PENDING_REQUEST_LOOKBACK_DAYS
from ..core.enums import CorrectionScope, LeaveType, RequestStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from .model import CorrectionRequest, LeaveRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)


def _require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")


def _optional_time(value: Any, field_name: str) -> Optional[str]:
    if value is None or str(value).strip() == "":
        return None
    normalized = normalize_time(value)
    if normalized is None:
        raise ValidationError(f"Invalid {field_name}. Use HH:mm")
    return normalized


class RequestService:
    """Leave and correction requests.

    Identity user ids are employee ids. Approval writes through the
    reconciler so the ledger stays the single source for payroll.
    """

    def __init__(
        self,
        requests: RequestRepository,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        reconciler: AttendanceReconciler,
        *,
        clock: Callable = now_local,
    ):
        self._requests = requests
        self._attendance = attendance
        self._employees = employees
        self._reconciler = reconciler
        self._clock = clock

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if employee is None or employee.is_deleted:
            raise NotFoundError("Employee not found")
        return employee

    # -------- Leave --------
    def submit_leave(self, actor: Actor, payload: dict) -> LeaveRequest:
        employee = self._employee(actor.user_id)

        try:
            leave_type = LeaveType(payload.get("leaveType"))
        except ValueError:
            allowed = ", ".join(t.value for t in LeaveType)
            raise ValidationError(f"leaveType must be one of: {allowed}") from None

        from_date, to_date = require_date_range(payload.get("fromDate"), payload.get("toDate"))
        reason = require_non_empty(payload.get("reason"), "reason")

        if employee.joining_date is not None:
            eligible_from = employee.joining_date + timedelta(days=LEAVE_ELIGIBILITY_DAYS)
            if self._clock().date() < eligible_from:
                raise ValidationError(
                    f"Leave can be requested after {LEAVE_ELIGIBILITY_DAYS} days of joining "
                    f"(eligible from {eligible_from.strftime('%d/%m/%Y')})"
                )

        if self._requests.has_overlapping_pending_leave(
            employee_id=employee.employee_id, from_date=from_date, to_date=to_date
        ):
            raise ValidationError("A pending leave request already overlaps these dates")

        request_id = self._requests.create_leave(
            employee_id=employee.employee_id,
            employee_number=employee.employee_number,
            employee_name=employee.full_name,
            leave_type=leave_type,
            from_date=from_date,
            to_date=to_date,
            reason=reason,
        )
        logger.info(
            "Leave request %s submitted by %s (%s..%s)",
            request_id,
            employee.employee_number,
            from_date.isoformat(),
            to_date.isoformat(),
        )
        created = self._requests.get_leave(request_id=request_id)
        if created is None:
            raise NotFoundError("Leave request not found")
        return created

    def approve_leave(self, actor: Actor, request_id: int) -> dict:
        _require_admin(actor)
        req = self._requests.get_leave(request_id=int(request_id))
        if req is None:
            raise NotFoundError("Leave request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Request has already been processed")

        employee = self._employee(req.employee_id)
        decided = self._requests.decide_leave(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            decided_by=actor.user_id,
        )
        if not decided:
            raise ValidationError("Request has already been processed")

        result = self._reconciler.apply_leave(employee, req.from_date, req.to_date, actor_id=actor.user_id)
        return {
            "message": "Leave approved",
            "daysApplied": result.saved,
            "created": result.created,
            "updated": result.updated,
            "failed": result.failed,
            "errors": result.errors,
        }

    def reject_leave(self, actor: Actor, request_id: int, reason: Optional[str]) -> None:
        _require_admin(actor)
        rejection_reason = require_non_empty(reason, "reason")
        if self._requests.get_leave(request_id=int(request_id)) is None:
            raise NotFoundError("Leave request not found")
        decided = self._requests.decide_leave(
            request_id=int(request_id),
            status=RequestStatus.REJECTED,
            decided_by=actor.user_id,
            rejection_reason=rejection_reason,
        )
        if not decided:
            raise ValidationError("Request has already been processed")
        logger.info("Leave request %s rejected by %s", request_id, actor.user_id)

    # -------- Correction --------
    def submit_correction(self, actor: Actor, payload: dict) -> CorrectionRequest:
        employee = self._employee(actor.user_id)
        work_date = require_date(payload.get("date"), "date")

        try:
            scope = CorrectionScope(payload.get("correctionType") or CorrectionScope.BOTH.value)
        except ValueError:
            raise ValidationError("correctionType must be In, Out or Both") from None

        in_time = _optional_time(payload.get("inTime", payload.get("fromTime")), "inTime")
        out_time = _optional_time(payload.get("outTime", payload.get("toTime")), "outTime")
        if scope in (CorrectionScope.IN, CorrectionScope.BOTH) and in_time is None:
            raise ValidationError("inTime is required for this correction")
        if scope in (CorrectionScope.OUT, CorrectionScope.BOTH) and out_time is None:
            raise ValidationError("outTime is required for this correction")
        if scope == CorrectionScope.IN:
            out_time = None
        elif scope == CorrectionScope.OUT:
            in_time = None

        reason = require_non_empty(payload.get("reason"), "reason")

        if self._requests.has_pending_correction(employee_id=employee.employee_id, work_date=work_date):
            raise ValidationError("A pending correction already exists for this date")

        current = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        request_id = self._requests.create_correction(
            employee_id=employee.employee_id,
            employee_number=employee.employee_number,
            employee_name=employee.full_name,
            work_date=work_date,
            scope=scope,
            original_in_time=current.in_time if current else None,
            corrected_in_time=in_time,
            original_out_time=current.out_time if current else None,
            corrected_out_time=out_time,
            reason=reason,
        )
        logger.info("Correction request %s submitted by %s for %s", request_id, employee.employee_number, work_date)
        created = self._requests.get_correction(request_id=request_id)
        if created is None:
            raise NotFoundError("Correction request not found")
        return created

    def approve_correction(self, actor: Actor, request_id: int) -> dict:
        _require_admin(actor)
        req = self._requests.get_correction(request_id=int(request_id))
        if req is None:
            raise NotFoundError("Correction request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Request has already been processed")

        employee = self._employee(req.employee_id)
        decided = self._requests.decide_correction(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            decided_by=actor.user_id,
        )
        if not decided:
            raise ValidationError("Request has already been processed")

        entry = self._reconciler.apply_correction(
            employee,
            req.work_date,
            scope=req.scope,
            in_time=req.corrected_in_time,
            out_time=req.corrected_out_time,
            actor_id=actor.user_id,
        )
        return {"message": "Correction approved", "record": entry.to_dict()}

    def reject_correction(self, actor: Actor, request_id: int, reason: Optional[str]) -> None:
        _require_admin(actor)
        rejection_reason = require_non_empty(reason, "reason")
        if self._requests.get_correction(request_id=int(request_id)) is None:
            raise NotFoundError("Correction request not found")
        decided = self._requests.decide_correction(
            request_id=int(request_id),
            status=RequestStatus.REJECTED,
            decided_by=actor.user_id,
            rejection_reason=rejection_reason,
        )
        if not decided:
            raise ValidationError("Request has already been processed")
        logger.info("Correction request %s rejected by %s", request_id, actor.user_id)

    # -------- Listing --------
    def list_pending(self, actor: Actor) -> dict:
        _require_admin(actor)
        since = self._clock() - timedelta(days=PENDING_REQUEST_LOOKBACK_DAYS)
        leaves = self._requests.list_leave_requests(status=RequestStatus.PENDING, created_since=since)
        corrections = self._requests.list_correction_requests(status=RequestStatus.PENDING, created_since=since)
        return {
            "leaveRequests": [r.to_dict() for r in leaves],
            "correctionRequests": [r.to_dict() for r in corrections],
            "total": len(leaves) + len(corrections),
        }

    def list_mine(self, actor: Actor) -> dict:
        leaves = self._requests.list_leave_requests(employee_id=actor.user_id)
        corrections = self._requests.list_correction_requests(employee_id=actor.user_id)
        return {
            "leaveRequests": [r.to_dict() for r in leaves],
            "correctionRequests": [r.to_dict() for r in corrections],
        }
