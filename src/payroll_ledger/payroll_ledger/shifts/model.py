from __future__ import annotations

from dataclasses import dataclass

from ..common.time_utils import hours_between, normalize_time, to_minutes, validate_shift_times
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ShiftPolicy:
    """Domain entity: a scheduled shift pair.

    A copy of the employee's shift is stored on every ledger entry, so a later
    schedule change never rewrites historical pay.
    """

    start: str
    end: str

    @classmethod
    def parse(cls, start: object, end: object) -> "ShiftPolicy":
        start_n = normalize_time(start)
        end_n = normalize_time(end)
        if start_n is None or end_n is None:
            raise ValidationError(f"Invalid shift times: {start!r} - {end!r}")
        validate_shift_times(start_n, end_n)
        return cls(start=start_n, end=end_n)

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def is_night_shift(self) -> bool:
        """The timeline wraps past midnight."""
        return to_minutes(self.end) < to_minutes(self.start)

    @property
    def scheduled_hours(self) -> float:
        return scheduled_hours(self)

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "isNightShift": self.is_night_shift}


def scheduled_hours(shift: ShiftPolicy) -> float:
    return hours_between(shift.start, shift.end, shift.is_night_shift)
