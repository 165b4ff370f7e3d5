from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.time_utils import is_late
from ..core.enums import AttendanceStatus
from ..shifts.model import ShiftPolicy
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import StatusDecision, StatusStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class StatusStrategyFactory:
    """Factory Pattern: choose the status strategy from the day's punches.

    Status is derived fresh on every write, it is never a stored state machine.
    """

    def for_times(self, *, in_time: Optional[str], out_time: Optional[str], shift: ShiftPolicy) -> StatusStrategy:
        if not in_time and not out_time:
            return AbsentStrategy()
        if in_time and is_late(in_time, shift.start):
            return LateStrategy()
        return PresentStrategy()


_factory = StatusStrategyFactory()


def decide_status(*, in_time: Optional[str], out_time: Optional[str], shift: ShiftPolicy) -> StatusDecision:
    strategy = _factory.for_times(in_time=in_time, out_time=out_time, shift=shift)
    return strategy.decide(in_time=in_time, out_time=out_time, shift=shift)


def derive_status(*, in_time: Optional[str], out_time: Optional[str], shift: ShiftPolicy) -> AttendanceStatus:
    return decide_status(in_time=in_time, out_time=out_time, shift=shift).status
