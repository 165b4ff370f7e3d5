from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftPolicy
from .base import StatusDecision, StatusStrategy


class PresentStrategy(StatusStrategy):
    """On-time check-in, or an out punch with no in punch."""

    def decide(self, *, in_time: Optional[str], out_time: Optional[str], shift: ShiftPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="On time")
