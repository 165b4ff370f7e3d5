"""Validated request inputs for the manual-save paths.

Optional numeric fields are coalesced to 0 and booleans to False here, once,
so nothing downstream has to guess.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import now_local
from ..common.time_utils import normalize_time, to_minutes
from ..common.validators import as_bool, as_float, require_date
from ..core.constants import DEFAULT_OT_MULTIPLIER, OT_MULTIPLIERS
from ..core.enums import AttendanceStatus, OtEntryType
from ..core.exceptions import ValidationError
from ..payroll.calculator.financial_calculator import DeductionInput, OtInput
from .model import DeductionItem, OtItem


def _optional_time(value: Any, field_name: str) -> Optional[str]:
    if value is None or str(value).strip() == "":
        return None
    normalized = normalize_time(value)
    if normalized is None:
        raise ValidationError(f"Invalid {field_name} '{value}' (HH:mm expected)")
    return normalized


def _allowed_multiplier(value: Any) -> float:
    number = as_float(value, DEFAULT_OT_MULTIPLIER)
    return number if number in OT_MULTIPLIERS else DEFAULT_OT_MULTIPLIER


def clean_deduction_details(raw: Any, *, created_at: Optional[datetime] = None) -> tuple[DeductionItem, ...]:
    """Keep items with a non-negative amount and a reason; drop the rest."""

    if not isinstance(raw, list):
        return ()
    items = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        amount = as_float(item.get("amount"))
        reason = str(item.get("reason") or "").strip()
        if amount >= 0 and reason:
            items.append(DeductionItem(amount=amount, reason=reason, created_at=created_at))
    return tuple(items)


def clean_ot_details(raw: Any, *, created_at: Optional[datetime] = None) -> tuple[OtItem, ...]:
    """manual items need amount >= 0, calc items need hours > 0. Both need a reason."""

    if not isinstance(raw, list):
        return ()
    items = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        kind = OtEntryType.MANUAL if item.get("type") == OtEntryType.MANUAL.value else OtEntryType.CALC
        ot = OtItem(
            type=kind,
            reason=str(item.get("reason") or "").strip(),
            amount=as_float(item.get("amount")),
            hours=as_float(item.get("hours")),
            rate=_allowed_multiplier(item.get("rate")),
            created_at=created_at,
        )
        if not ot.reason:
            continue
        if kind == OtEntryType.MANUAL and ot.amount < 0:
            continue
        if kind == OtEntryType.CALC and ot.hours <= 0:
            continue
        items.append(ot)
    return tuple(items)


@dataclass(frozen=True)
class ManualEdit:
    employee_id: int
    work_date: date
    status: AttendanceStatus
    in_time: Optional[str]
    out_time: Optional[str]
    out_next_day: bool
    ot: OtInput
    deduction: DeductionInput

    @classmethod
    def from_payload(cls, payload: Any) -> "ManualEdit":
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        try:
            employee_id = int(payload.get("empId"))
        except (TypeError, ValueError):
            raise ValidationError("empId is required") from None

        work_date = require_date(payload.get("date"), "date")

        raw_status = payload.get("status") or AttendanceStatus.PRESENT.value
        try:
            status = AttendanceStatus(raw_status)
        except ValueError:
            raise ValidationError(f"Invalid status '{raw_status}'") from None

        in_time = _optional_time(payload.get("inTime"), "inTime")
        out_time = _optional_time(payload.get("outTime"), "outTime")

        if "outNextDay" in payload and payload.get("outNextDay") is not None:
            out_next_day = as_bool(payload.get("outNextDay"))
        else:
            out_next_day = bool(in_time and out_time and to_minutes(out_time) < to_minutes(in_time))

        stamp = now_local()
        ot = OtInput(
            hours=max(0.0, as_float(payload.get("otHours"))),
            multiplier=_allowed_multiplier(payload.get("otMultiplier")),
            details=clean_ot_details(payload.get("otDetails"), created_at=stamp),
        )
        deduction = DeductionInput(
            amount=max(0.0, as_float(payload.get("deduction"))),
            details=clean_deduction_details(payload.get("deductionDetails"), created_at=stamp),
        )

        return cls(
            employee_id=employee_id,
            work_date=work_date,
            status=status,
            in_time=in_time,
            out_time=out_time,
            out_next_day=out_next_day,
            ot=ot,
            deduction=deduction,
        )
