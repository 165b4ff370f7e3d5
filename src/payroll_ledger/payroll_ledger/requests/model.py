from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_date, format_datetime
from ..core.enums import CorrectionScope, LeaveType, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    employee_number: str
    employee_name: str
    leave_type: LeaveType
    from_date: date
    to_date: date
    reason: str
    status: RequestStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def days(self) -> int:
        return (self.to_date - self.from_date).days + 1

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "empId": self.employee_id,
            "empNumber": self.employee_number,
            "empName": self.employee_name,
            "leaveType": self.leave_type.value,
            "fromDate": format_date(self.from_date),
            "toDate": format_date(self.to_date),
            "days": self.days,
            "reason": self.reason,
            "status": self.status.value,
            "createdAt": format_datetime(self.created_at),
            "decidedBy": self.decided_by,
            "decidedAt": format_datetime(self.decided_at),
            "rejectionReason": self.rejection_reason,
        }


@dataclass(frozen=True)
class CorrectionRequest:
    """Employee-submitted fix for one day's in and/or out time.

    The ledger times at submission are kept so the reviewer sees what changes.
    """

    request_id: int
    employee_id: int
    employee_number: str
    employee_name: str
    work_date: date
    scope: CorrectionScope
    original_in_time: Optional[str]
    corrected_in_time: Optional[str]
    original_out_time: Optional[str]
    corrected_out_time: Optional[str]
    reason: str
    status: RequestStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "empId": self.employee_id,
            "empNumber": self.employee_number,
            "empName": self.employee_name,
            "date": format_date(self.work_date),
            "correctionType": self.scope.value,
            "originalInTime": self.original_in_time,
            "correctedInTime": self.corrected_in_time,
            "originalOutTime": self.original_out_time,
            "correctedOutTime": self.corrected_out_time,
            "reason": self.reason,
            "status": self.status.value,
            "createdAt": format_datetime(self.created_at),
            "decidedBy": self.decided_by,
            "decidedAt": format_datetime(self.decided_at),
            "rejectionReason": self.rejection_reason,
        }
