from __future__ import annotations

from datetime import date

import pytest

from src.payroll_ledger.payroll_ledger.attendance.csv_parser import group_by_employee_and_date, parse_punch_csv
from src.payroll_ledger.payroll_ledger.core.enums import PunchFlag
from src.payroll_ledger.payroll_ledger.core.exceptions import ValidationError


def test_parse_valid_rows_with_header_and_bom():
    content = (
        "\ufeffEmployee|First|Last|Date|Time|Flag\n"
        "emp001|Asha|Perera|05/03/2025|09:05|0\n"
        "\n"
        "EMP001|Asha|Perera|05/03/2025|1800|1\n"
    )

    result = parse_punch_csv(content)

    assert result.errors == []
    assert len(result.parsed) == 2
    first, second = result.parsed
    assert first.employee_number == "EMP001"
    assert first.work_date == date(2025, 3, 5)
    assert first.time == "09:05"
    assert first.flag == PunchFlag.IN
    assert second.time == "18:00"
    assert second.flag == PunchFlag.OUT
    assert second.row_number == 4


def test_bad_rows_are_reported_and_batch_continues():
    content = "\n".join(
        [
            "EMP001|Asha|Perera|05/03/2025|09:00|0",
            "EMP001|Asha|Perera|30/02/2025|09:00|0",
            "EMP001|Asha|Perera|05/03/2025|99:99|0",
            "EMP001|Asha|Perera|05/03/2025|09:00|2",
            "EMP001|Asha|05/03/2025|09:00|0",
            "|Asha|Perera|05/03/2025|09:00|0",
            "EMP002|Ravi|Kumar|05/03/2025|18:00|1",
        ]
    )

    result = parse_punch_csv(content)

    assert [r.employee_number for r in result.parsed] == ["EMP001", "EMP002"]
    assert [e.row_number for e in result.errors] == [2, 3, 4, 5, 6]
    assert result.errors[0].message().startswith("Row 2: Invalid date")
    assert "columns" in result.errors[3].reason


def test_first_row_with_bad_date_is_reported_not_taken_as_header():
    content = "EMP001|A|B|bad|09:00|0\nEMP001|A|B|05/03/2025|18:00|1\n"

    result = parse_punch_csv(content)

    assert [e.row_number for e in result.errors] == [1]
    assert "Invalid date" in result.errors[0].reason
    assert len(result.parsed) == 1
    assert result.parsed[0].row_number == 2


def test_first_row_with_empty_date_is_reported():
    result = parse_punch_csv("EMP001|A|B||09:00|0\n")

    assert result.parsed == []
    assert [e.row_number for e in result.errors] == [1]


def test_missing_content_raises():
    with pytest.raises(ValidationError):
        parse_punch_csv(None)


def test_group_by_employee_and_date_keeps_file_order():
    content = "\n".join(
        [
            "EMP001|Asha|Perera|05/03/2025|09:00|0",
            "EMP002|Ravi|Kumar|05/03/2025|09:10|0",
            "EMP001|Asha|Perera|05/03/2025|18:00|1",
            "EMP001|Asha|Perera|06/03/2025|09:00|0",
        ]
    )

    groups = group_by_employee_and_date(parse_punch_csv(content).parsed)

    assert [(g.employee_number, g.work_date.day) for g in groups] == [("EMP001", 5), ("EMP002", 5), ("EMP001", 6)]
    assert groups[0].punch_times == ["09:00", "18:00"]
