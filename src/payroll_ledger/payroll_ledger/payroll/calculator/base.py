from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DayPay:
    hours_worked: float
    base_pay: float


class PayCase(ABC):
    """Strategy Pattern: one closed case of the daily base-pay policy."""

    name: str = ""

    @abstractmethod
    def day_pay(
        self,
        *,
        in_time: Optional[str],
        out_time: Optional[str],
        out_next_day: bool,
        scheduled_hours: float,
        hourly_rate: float,
    ) -> DayPay:
        raise NotImplementedError
