from __future__ import annotations

from typing import Optional

from ...common.time_utils import delay_minutes
from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftPolicy
from .base import StatusDecision, StatusStrategy


class LateStrategy(StatusStrategy):
    """Late check-in."""

    def decide(self, *, in_time: Optional[str], out_time: Optional[str], shift: ShiftPolicy) -> StatusDecision:
        minutes = delay_minutes(in_time, shift.start)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes} minutes", delay_minutes=minutes)
