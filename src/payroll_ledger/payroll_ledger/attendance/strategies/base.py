from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftPolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None
    delay_minutes: int = 0


class StatusStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a day's attendance status."""

    @abstractmethod
    def decide(self, *, in_time: Optional[str], out_time: Optional[str], shift: ShiftPolicy) -> StatusDecision:
        raise NotImplementedError
