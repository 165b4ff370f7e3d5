"""HH:mm time arithmetic.

All values are naive local wall-clock strings. Overnight durations are handled
by adding one day of minutes, never by looking at a calendar.
"""

from __future__ import annotations

import re
from typing import Optional

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import InvalidTimeFormat, ValidationError

_CANONICAL = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_FLEXIBLE = re.compile(r"^(\d{1,2}):(\d{1,2})$")
_COMPACT = re.compile(r"^\d{3,4}$")
_TWELVE_HOUR = re.compile(r"^(\d{1,2})(?::(\d{1,2}))?\s*([ap])\.?\s*m\.?$", re.IGNORECASE)


def is_canonical_time(value: object) -> bool:
    return isinstance(value, str) and bool(_CANONICAL.match(value))


def to_minutes(value: str) -> int:
    """Canonical "HH:mm" -> minutes from midnight."""
    if not is_canonical_time(value):
        raise InvalidTimeFormat(f"Invalid time format (HH:mm expected): {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total_minutes: int) -> str:
    """Minutes -> "HH:mm". Does not wrap at 24h, use for durations."""
    total = max(0, int(total_minutes))
    return f"{total // 60:02d}:{total % 60:02d}"


def _fmt(hours: int, minutes: int) -> Optional[str]:
    if 0 <= hours <= 23 and 0 <= minutes <= 59:
        return f"{hours:02d}:{minutes:02d}"
    return None


def normalize_time(value: object) -> Optional[str]:
    """Normalize flexible time input to canonical "HH:mm".

    Accepts 09:00, 9:5, 900, 0900, 1800, 9pm, 09:00 PM, 12:30 a.m.
    Returns None when the value cannot be interpreted.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    if _CANONICAL.match(text):
        return text

    m = _FLEXIBLE.match(text)
    if m:
        return _fmt(int(m.group(1)), int(m.group(2)))

    if _COMPACT.match(text):
        if len(text) == 3:
            return _fmt(int(text[0]), int(text[1:]))
        return _fmt(int(text[:2]), int(text[2:]))

    m = _TWELVE_HOUR.match(text)
    if m:
        hours = int(m.group(1))
        minutes = int(m.group(2) or 0)
        if not 1 <= hours <= 12:
            return None
        hours = hours % 12
        if m.group(3).lower() == "p":
            hours += 12
        return _fmt(hours, minutes)

    return None


def hours_between(in_time: Optional[str], out_time: Optional[str], out_next_day: bool = False) -> float:
    """Decimal hours from in_time to out_time, always >= 0.

    A negative raw difference, or out_next_day=True, means the out time is on
    the following calendar day.
    """

    if not in_time or not out_time:
        return 0.0
    diff = to_minutes(out_time) - to_minutes(in_time)
    if out_next_day or diff < 0:
        diff += MINUTES_PER_DAY
    return max(0.0, diff / 60)


def is_late(in_time: Optional[str], shift_start: Optional[str]) -> bool:
    """True if in_time is strictly after shift_start."""
    if not in_time or not shift_start:
        return False
    return to_minutes(in_time) > to_minutes(shift_start)


def delay_minutes(in_time: Optional[str], shift_start: Optional[str]) -> int:
    if not in_time or not shift_start:
        return 0
    return max(0, to_minutes(in_time) - to_minutes(shift_start))


def validate_shift_times(start: str, end: str) -> None:
    """Both ends must be canonical; night shifts (end < start) are legal."""
    if not is_canonical_time(start):
        raise ValidationError(f'Invalid shift start time: "{start}"')
    if not is_canonical_time(end):
        raise ValidationError(f'Invalid shift end time: "{end}"')
    if start == end:
        raise ValidationError("Shift start and end times cannot be identical")
