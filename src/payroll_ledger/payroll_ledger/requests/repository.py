from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionScope, LeaveType, RequestStatus
from .model import CorrectionRequest, LeaveRequest


class RequestRepository(Protocol):
    # Leave requests
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
        raise NotImplementedError

    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def has_overlapping_pending_leave(self, *, employee_id: int, from_date: date, to_date: date) -> bool:
        raise NotImplementedError

    def list_leave_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        created_since: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide_leave(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Only a Pending request can be decided. Returns False otherwise."""

        raise NotImplementedError

    # Correction requests
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
        raise NotImplementedError

    def get_correction(self, *, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def has_pending_correction(self, *, employee_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def list_correction_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        created_since: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def decide_correction(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
