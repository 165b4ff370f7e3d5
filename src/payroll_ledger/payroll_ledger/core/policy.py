"""Overridable business policy.

Defaults come from core.constants; inject a different instance into the
engines to change them.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    ATTENDANCE_WEIGHT,
    OT_SATURATION_HOURS_PER_DAY,
    OT_WEIGHT,
    PARTIAL_PUNCH_PAY_FACTOR,
    PUNCH_WINDOW_HOURS,
    PUNCTUALITY_WEIGHT,
    RATING_AVERAGE_MIN,
    RATING_EXCELLENT_MIN,
    RATING_GOOD_MIN,
)
from .enums import PairingMode, Rating


@dataclass(frozen=True)
class PayPolicy:
    partial_punch_factor: float = PARTIAL_PUNCH_PAY_FACTOR
    punch_window_hours: float = PUNCH_WINDOW_HOURS
    pairing_mode: PairingMode = PairingMode.WINDOW


@dataclass(frozen=True)
class ScoringPolicy:
    attendance_weight: float = ATTENDANCE_WEIGHT
    punctuality_weight: float = PUNCTUALITY_WEIGHT
    ot_weight: float = OT_WEIGHT
    ot_saturation_hours_per_day: float = OT_SATURATION_HOURS_PER_DAY
    excellent_min: float = RATING_EXCELLENT_MIN
    good_min: float = RATING_GOOD_MIN
    average_min: float = RATING_AVERAGE_MIN

    def rating_for(self, score: float) -> Rating:
        if score >= self.excellent_min:
            return Rating.EXCELLENT
        if score >= self.good_min:
            return Rating.GOOD
        if score >= self.average_min:
            return Rating.AVERAGE
        return Rating.POOR
