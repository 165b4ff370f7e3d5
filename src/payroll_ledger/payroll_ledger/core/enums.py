from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """Role supplied by the identity context."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Day status stored on a ledger entry."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    LEAVE = "Leave"


class EntrySource(str, Enum):
    """Write path that last touched a ledger entry."""

    SYSTEM = "system"
    MANUAL = "manual"
    CSV = "csv"
    CORRECTION_APPROVAL = "correction_approval"
    LEAVE_APPROVAL = "leave_approval"


class Ownership(str, Enum):
    """Who owns a ledger entry.

    HUMAN_LOCKED entries were saved by an admin; only another manual save may
    change them through the import path.
    """

    SYSTEM = "system"
    HUMAN_LOCKED = "human_locked"


class PunchFlag(IntEnum):
    IN = 0
    OUT = 1


class PairingMode(str, Enum):
    """How a CSV employee-day is turned into one in/out pair."""

    WINDOW = "window"
    TYPED = "typed"


class CorrectionScope(str, Enum):
    IN = "In"
    OUT = "Out"
    BOTH = "Both"


class RequestStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveType(str, Enum):
    HOLIDAY = "Holiday Leave"
    SICK = "Sick Leave"
    CASUAL = "Casual Leave"


class SalaryType(str, Enum):
    HOURLY = "hourly"
    MONTHLY = "monthly"


class OtEntryType(str, Enum):
    MANUAL = "manual"
    CALC = "calc"


class PayrollStatus(str, Enum):
    """draft -> approved -> paid. Anything past draft is admin-fixed."""

    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"


class Rating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    POOR = "Poor"


class LogType(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    SUMMARY = "SUMMARY"
