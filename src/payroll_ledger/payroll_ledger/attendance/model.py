from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_date, format_datetime
from ..core.constants import DEFAULT_OT_MULTIPLIER
from ..core.enums import AttendanceStatus, EntrySource, OtEntryType, Ownership
from ..shifts.model import ShiftPolicy


@dataclass(frozen=True)
class DeductionItem:
    """One itemized deduction with its justification."""

    amount: float
    reason: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "reason": self.reason,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DeductionItem":
        created = data.get("createdAt")
        return cls(
            amount=float(data.get("amount") or 0),
            reason=str(data.get("reason") or ""),
            created_at=datetime.fromisoformat(created) if created else None,
        )


@dataclass(frozen=True)
class OtItem:
    """One itemized OT adjustment.

    manual -> contributes its literal amount.
    calc   -> contributes hours x rate x hourly rate.
    """

    type: OtEntryType
    reason: str
    amount: float = 0.0
    hours: float = 0.0
    rate: float = 1.0
    created_at: Optional[datetime] = None

    def value(self, hourly_rate: float) -> float:
        if self.type == OtEntryType.MANUAL:
            return self.amount
        return self.hours * self.rate * hourly_rate

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "amount": self.amount,
            "hours": self.hours,
            "rate": self.rate,
            "reason": self.reason,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OtItem":
        created = data.get("createdAt")
        return cls(
            type=OtEntryType(data.get("type") or OtEntryType.CALC.value),
            reason=str(data.get("reason") or ""),
            amount=float(data.get("amount") or 0),
            hours=float(data.get("hours") or 0),
            rate=float(data.get("rate") or 1),
            created_at=datetime.fromisoformat(created) if created else None,
        )


@dataclass(frozen=True)
class Financials:
    hours_worked: float = 0.0
    scheduled_hours: float = 0.0
    base_pay: float = 0.0
    deduction: float = 0.0
    deduction_details: tuple[DeductionItem, ...] = ()
    ot_multiplier: float = DEFAULT_OT_MULTIPLIER
    ot_hours: float = 0.0
    ot_amount: float = 0.0
    ot_details: tuple[OtItem, ...] = ()
    final_day_earning: float = 0.0

    @classmethod
    def zero(cls, *, scheduled_hours: float = 0.0) -> "Financials":
        return cls(scheduled_hours=scheduled_hours)

    def to_dict(self) -> dict:
        return {
            "hoursWorked": self.hours_worked,
            "scheduledHours": self.scheduled_hours,
            "basePay": self.base_pay,
            "deduction": self.deduction,
            "deductionDetails": [d.to_dict() for d in self.deduction_details],
            "otMultiplier": self.ot_multiplier,
            "otHours": self.ot_hours,
            "otAmount": self.ot_amount,
            "otDetails": [o.to_dict() for o in self.ot_details],
            "finalDayEarning": self.final_day_earning,
        }


@dataclass(frozen=True)
class EntryMetadata:
    source: EntrySource = EntrySource.SYSTEM
    last_updated_by: Optional[int] = None
    last_modified_at: Optional[datetime] = None
    csv_import_batch: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceEntry:
    """Domain entity: one ledger row per employee per calendar day.

    For night shifts work_date is the day the shift starts, even when the out
    punch lands on the next calendar day (out_next_day=True).
    """

    employee_id: int
    work_date: date
    employee_number: str
    employee_name: str
    department: str
    shift: ShiftPolicy
    hourly_rate: float
    status: AttendanceStatus = AttendanceStatus.ABSENT
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    out_next_day: bool = False
    financials: Financials = field(default_factory=Financials)
    ownership: Ownership = Ownership.SYSTEM
    metadata: EntryMetadata = field(default_factory=EntryMetadata)
    entry_id: Optional[int] = None
    is_deleted: bool = False

    @property
    def manual_override(self) -> bool:
        return self.ownership == Ownership.HUMAN_LOCKED

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "empId": self.employee_id,
            "empNumber": self.employee_number,
            "empName": self.employee_name,
            "department": self.department,
            "date": format_date(self.work_date),
            "dateRaw": self.work_date.isoformat(),
            "status": self.status.value,
            "inTime": self.in_time,
            "outTime": self.out_time,
            "outNextDay": self.out_next_day,
            "shift": self.shift.to_dict(),
            "hourlyRate": self.hourly_rate,
            "financials": self.financials.to_dict(),
            "manualOverride": self.manual_override,
            "source": self.metadata.source.value,
            "lastUpdatedBy": self.metadata.last_updated_by,
            "lastModified": format_datetime(self.metadata.last_modified_at),
            "lastModifiedRaw": self.metadata.last_modified_at.isoformat() if self.metadata.last_modified_at else None,
        }
