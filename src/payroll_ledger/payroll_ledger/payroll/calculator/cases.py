from __future__ import annotations

from typing import Optional

from ...common.time_utils import hours_between
from ...core.constants import PARTIAL_PUNCH_PAY_FACTOR
from .base import DayPay, PayCase


class LeaveCase(PayCase):
    """Approved leave: the full scheduled day is paid."""

    name = "leave"

    def day_pay(self, *, in_time, out_time, out_next_day, scheduled_hours, hourly_rate) -> DayPay:
        return DayPay(hours_worked=scheduled_hours, base_pay=scheduled_hours * hourly_rate)


class FullPairCase(PayCase):
    """Both punches present: pay actual hours between them."""

    name = "full_pair"

    def day_pay(self, *, in_time, out_time, out_next_day, scheduled_hours, hourly_rate) -> DayPay:
        hours = hours_between(in_time, out_time, out_next_day)
        return DayPay(hours_worked=hours, base_pay=hours * hourly_rate)


class PartialPunchCase(PayCase):
    """Exactly one punch present: a share of the scheduled day is paid."""

    name = "partial_punch"

    def __init__(self, factor: float = PARTIAL_PUNCH_PAY_FACTOR):
        self._factor = float(factor)

    def day_pay(self, *, in_time, out_time, out_next_day, scheduled_hours, hourly_rate) -> DayPay:
        return DayPay(hours_worked=scheduled_hours, base_pay=scheduled_hours * hourly_rate * self._factor)


class AbsentCase(PayCase):
    name = "absent"

    def day_pay(
        self,
        *,
        in_time: Optional[str],
        out_time: Optional[str],
        out_next_day: bool,
        scheduled_hours: float,
        hourly_rate: float,
    ) -> DayPay:
        return DayPay(hours_worked=0.0, base_pay=0.0)
