"""Resolve one employee-day's punches into a single in/out pair.

Window rule: every punch is placed on a timeline anchored at the scheduled
shift start S. Punches earlier than S on the clock are read as "after
midnight" (+1440). The in punch is the earliest punch in [S, S + 14h]; the
out punch is the earliest later punch still within S + 14h. Anchoring at the
scheduled start, not the observed check-in, keeps a stray early or late punch
from stretching the window, and the same code serves day and night shifts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..common.time_utils import to_minutes
from ..core.constants import MINUTES_PER_DAY, PUNCH_WINDOW_HOURS
from ..core.enums import PunchFlag
from .csv_parser import PunchRow


@dataclass(frozen=True)
class PunchPair:
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    out_next_day: bool = False

    @property
    def is_complete(self) -> bool:
        return bool(self.in_time and self.out_time)

    @property
    def is_empty(self) -> bool:
        return not self.in_time and not self.out_time


def shift_timeline_minutes(punch_time: str, shift_start_minutes: int) -> int:
    minutes = to_minutes(punch_time)
    if minutes < shift_start_minutes:
        minutes += MINUTES_PER_DAY
    return minutes


def _wraps(in_time: Optional[str], out_time: Optional[str]) -> bool:
    if not in_time or not out_time:
        return False
    return to_minutes(out_time) < to_minutes(in_time)


def pair_punches(
    shift_start: str,
    punch_times: Iterable[str],
    *,
    window_hours: float = PUNCH_WINDOW_HOURS,
) -> PunchPair:
    start = to_minutes(shift_start)
    window_end = start + int(window_hours * 60)

    timeline = sorted(
        ((shift_timeline_minutes(t, start), t) for t in punch_times if t),
        key=lambda p: p[0],
    )

    in_entry = next(((m, t) for m, t in timeline if start <= m <= window_end), None)
    if in_entry is None:
        return PunchPair()

    out_entry = next(((m, t) for m, t in timeline if in_entry[0] < m <= window_end), None)
    if out_entry is None:
        return PunchPair(in_time=in_entry[1])

    return PunchPair(in_time=in_entry[1], out_time=out_entry[1], out_next_day=_wraps(in_entry[1], out_entry[1]))


def merge_typed_punches(shift_start: str, rows: Sequence[PunchRow]) -> PunchPair:
    """Trust the device flags: earliest IN and latest OUT on the shift timeline."""

    start = to_minutes(shift_start)
    ins = sorted((r.time for r in rows if r.flag == PunchFlag.IN), key=lambda t: shift_timeline_minutes(t, start))
    outs = sorted((r.time for r in rows if r.flag == PunchFlag.OUT), key=lambda t: shift_timeline_minutes(t, start))

    in_time = ins[0] if ins else None
    out_time = outs[-1] if outs else None
    return PunchPair(in_time=in_time, out_time=out_time, out_next_day=_wraps(in_time, out_time))
