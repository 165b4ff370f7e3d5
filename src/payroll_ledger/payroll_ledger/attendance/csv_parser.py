"""Punch CSV parsing.

Format, one punch per line:

    employeeNumber|firstName|lastName|date(dd/mm/yyyy)|time|flag(0=in,1=out)

Every row is validated on its own. Bad rows land in ``errors`` with their
1-based line number; the batch always continues.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import parse_date
from ..common.time_utils import normalize_time
from ..core.constants import CSV_COLUMNS
from ..core.enums import PunchFlag
from ..core.exceptions import ValidationError

_HAS_DIGIT = re.compile(r"\d")


@dataclass(frozen=True)
class PunchRow:
    row_number: int
    employee_number: str
    first_name: str
    last_name: str
    work_date: date
    time: str
    flag: PunchFlag


@dataclass(frozen=True)
class RowError:
    row_number: int
    reason: str

    def message(self) -> str:
        return f"Row {self.row_number}: {self.reason}"


@dataclass
class ParseResult:
    parsed: list[PunchRow] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)


@dataclass
class PunchGroup:
    """All raw punches of one employee on one calendar day, in file order."""

    employee_number: str
    first_name: str
    last_name: str
    work_date: date
    rows: list[PunchRow] = field(default_factory=list)

    @property
    def punch_times(self) -> list[str]:
        return [r.time for r in self.rows]


def _looks_like_header(parts: list[str]) -> bool:
    # Labels only: a row with any usable date, time or flag is data, even if another column is bad.
    if len(parts) != CSV_COLUMNS:
        return not any(_HAS_DIGIT.search(p) for p in parts)
    date_text, time_text, flag_text = parts[3:]
    return parse_date(date_text) is None and normalize_time(time_text) is None and flag_text not in {"0", "1"}


def _parse_row(row_number: int, parts: list[str]) -> tuple[Optional[PunchRow], Optional[str]]:
    if len(parts) != CSV_COLUMNS:
        return None, f"Expected {CSV_COLUMNS} columns, got {len(parts)}"

    emp_number, first_name, last_name, date_text, time_text, flag_text = parts

    if not emp_number:
        return None, "Employee number is empty"

    work_date = parse_date(date_text)
    if work_date is None:
        return None, f"Invalid date '{date_text}' (dd/mm/yyyy expected)"

    punch_time = normalize_time(time_text)
    if punch_time is None:
        return None, f"Invalid time '{time_text}'"

    if flag_text not in {"0", "1"}:
        return None, f"Invalid flag '{flag_text}' (0=in, 1=out)"

    return (
        PunchRow(
            row_number=row_number,
            employee_number=emp_number.upper(),
            first_name=first_name,
            last_name=last_name,
            work_date=work_date,
            time=punch_time,
            flag=PunchFlag(int(flag_text)),
        ),
        None,
    )


def parse_punch_csv(content: Optional[str]) -> ParseResult:
    """Parse raw CSV text into typed punches plus per-row errors.

    Only a missing payload raises; row-level problems never do.
    """

    if content is None:
        raise ValidationError("CSV content is required")

    result = ParseResult()
    seen_data = False

    for row_number, line in enumerate(content.lstrip("\ufeff").splitlines(), start=1):
        if not line.strip():
            continue

        parts = [p.strip() for p in line.split("|")]
        if not seen_data and _looks_like_header(parts):
            seen_data = True
            continue
        seen_data = True

        row, error = _parse_row(row_number, parts)
        if error:
            result.errors.append(RowError(row_number=row_number, reason=error))
        else:
            result.parsed.append(row)

    return result


def group_by_employee_and_date(parsed: Iterable[PunchRow]) -> list[PunchGroup]:
    groups: dict[tuple[str, date], PunchGroup] = {}
    for row in parsed:
        key = (row.employee_number, row.work_date)
        group = groups.get(key)
        if group is None:
            group = PunchGroup(
                employee_number=row.employee_number,
                first_name=row.first_name,
                last_name=row.last_name,
                work_date=row.work_date,
            )
            groups[key] = group
        group.rows.append(row)
    return list(groups.values())
