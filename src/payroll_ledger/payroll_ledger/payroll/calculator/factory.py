from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ...core.constants import PARTIAL_PUNCH_PAY_FACTOR
from ...core.enums import AttendanceStatus
from .base import PayCase
from .cases import AbsentCase, FullPairCase, LeaveCase, PartialPunchCase


@dataclass
class PayCaseFactory:
    """Factory Pattern: choose the pay case for one ledger day.

    Leave and Absent are imposed by status. Otherwise the punches decide:
    both -> full pair, one -> partial punch, none -> absent.
    """

    partial_factor: float = PARTIAL_PUNCH_PAY_FACTOR
    _partial: PartialPunchCase = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._partial = PartialPunchCase(self.partial_factor)

    def for_day(self, *, status: AttendanceStatus, in_time: Optional[str], out_time: Optional[str]) -> PayCase:
        if status == AttendanceStatus.LEAVE:
            return LeaveCase()
        if status == AttendanceStatus.ABSENT:
            return AbsentCase()
        if in_time and out_time:
            return FullPairCase()
        if in_time or out_time:
            return self._partial
        return AbsentCase()
