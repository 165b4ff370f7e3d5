from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from ..core.constants import PAY_PERIOD_START_DAY

_DMY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ][\d:.]+(?:Z|[+-]\d{2}:?\d{2})?)?$")


def parse_date(value: object) -> Optional[date]:
    """Parse dd/mm/yyyy or ISO 8601 (YYYY-MM-DD[THH:mm:ss]) into a calendar day.

    Time-of-day is discarded. Returns None for anything unparseable or
    impossible (e.g. 30/02/2025, year outside 1900-2100).
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    m = _DMY.match(text)
    if m:
        day, month, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        m = _ISO.match(text)
        if not m:
            return None
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))

    if not 1900 <= year <= 2100:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(value: Optional[date]) -> str:
    """date -> dd/mm/yyyy (API/UI format)."""
    if not value:
        return ""
    return value.strftime("%d/%m/%Y")


def format_datetime(value: Optional[datetime]) -> str:
    if not value:
        return "--"
    return value.strftime("%d/%m/%Y %H:%M")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end] inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_working_days(start: date, end: date) -> int:
    """Mon-Fri days in [start, end]. Holidays are not modeled."""
    return sum(1 for d in iter_days(start, end) if d.weekday() < 5)


def period_label(start: date) -> str:
    return start.strftime("%B %Y")


@dataclass(frozen=True)
class PayPeriod:
    start: date
    end: date
    label: str


def company_pay_period(on: Optional[date] = None) -> PayPeriod:
    """Pay period containing `on`: the 18th of one month to the 17th of the next.

    2025-01-20 -> 2025-01-18 .. 2025-02-17
    2025-01-10 -> 2024-12-18 .. 2025-01-17
    """

    on = on or date.today()
    if on.day >= PAY_PERIOD_START_DAY:
        start = on.replace(day=PAY_PERIOD_START_DAY)
    else:
        first = on.replace(day=1)
        start = (first - timedelta(days=1)).replace(day=PAY_PERIOD_START_DAY)

    next_month = (start.replace(day=1) + timedelta(days=32)).replace(day=1)
    end = next_month.replace(day=PAY_PERIOD_START_DAY - 1)

    label = f"{start.day} {start.strftime('%b')} - {end.day} {end.strftime('%b %Y')}"
    return PayPeriod(start=start, end=end, label=label)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
