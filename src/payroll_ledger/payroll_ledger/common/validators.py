from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_date


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_date(value: Any, field_name: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f"Invalid {field_name}. Use dd/mm/yyyy or YYYY-MM-DD")
    return parsed


def require_date_range(start_value: Any, end_value: Any, *, start_name: str = "fromDate", end_name: str = "toDate") -> tuple[date, date]:
    if not start_value or not end_value:
        raise ValidationError(f"{start_name} and {end_name} required")

    start = require_date(start_value, start_name)
    end = require_date(end_value, end_name)
    if end < start:
        raise ValidationError(f"{end_name} must be on or after {start_name}")
    return start, end


def as_float(value: Any, default: float = 0.0) -> float:
    """Null-coalescing numeric read: None, '' or garbage -> default."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
