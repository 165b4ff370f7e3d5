from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ...attendance.model import DeductionItem, Financials, OtItem
from ...core.constants import DEFAULT_OT_MULTIPLIER, OT_MULTIPLIERS
from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftPolicy, scheduled_hours
from .factory import PayCaseFactory


@dataclass(frozen=True)
class OtInput:
    """Flat OT (hours x multiplier) or itemized details. Details win when present."""

    hours: float = 0.0
    multiplier: float = DEFAULT_OT_MULTIPLIER
    details: tuple[OtItem, ...] = ()


@dataclass(frozen=True)
class DeductionInput:
    """Flat deduction or itemized details. Details win when present."""

    amount: float = 0.0
    details: tuple[DeductionItem, ...] = ()


def _valid_multiplier(value: Optional[float]) -> float:
    return value if value in OT_MULTIPLIERS else DEFAULT_OT_MULTIPLIER


def _ot_totals(ot: OtInput, hourly_rate: float) -> tuple[float, float]:
    if ot.details:
        amount = sum(item.value(hourly_rate) for item in ot.details)
        hours = sum(item.hours or 0 for item in ot.details)
        return hours, amount
    hours = ot.hours or 0.0
    return hours, hours * hourly_rate * _valid_multiplier(ot.multiplier)


def _deduction_total(deduction: DeductionInput) -> float:
    if deduction.details:
        return sum(item.amount or 0 for item in deduction.details)
    return deduction.amount or 0.0


def final_day_earning(base_pay: float, deduction: float, ot_amount: float) -> float:
    return max(0.0, (base_pay or 0) - (deduction or 0) + (ot_amount or 0))


class FinancialCalculator:
    """The single place a ledger day's money is computed.

    CSV import, manual save, correction approval, leave approval and demo
    seeding all call into this class.
    """

    def __init__(self, *, factory: Optional[PayCaseFactory] = None):
        self._factory = factory or PayCaseFactory()

    def compute(
        self,
        *,
        status: AttendanceStatus,
        in_time: Optional[str],
        out_time: Optional[str],
        out_next_day: bool = False,
        shift: ShiftPolicy,
        hourly_rate: Optional[float],
        ot: Optional[OtInput] = None,
        deduction: Optional[DeductionInput] = None,
    ) -> Financials:
        rate = float(hourly_rate or 0)
        ot = ot or OtInput()
        deduction = deduction or DeductionInput()

        scheduled = scheduled_hours(shift)
        case = self._factory.for_day(status=status, in_time=in_time, out_time=out_time)
        pay = case.day_pay(
            in_time=in_time,
            out_time=out_time,
            out_next_day=bool(out_next_day),
            scheduled_hours=scheduled,
            hourly_rate=rate,
        )

        ot_hours, ot_amount = _ot_totals(ot, rate)
        total_deduction = _deduction_total(deduction)

        return Financials(
            hours_worked=pay.hours_worked,
            scheduled_hours=scheduled,
            base_pay=pay.base_pay,
            deduction=total_deduction,
            deduction_details=tuple(deduction.details),
            ot_multiplier=_valid_multiplier(ot.multiplier),
            ot_hours=ot_hours,
            ot_amount=ot_amount,
            ot_details=tuple(ot.details),
            final_day_earning=final_day_earning(pay.base_pay, total_deduction, ot_amount),
        )

    def recompute_base(
        self,
        existing: Financials,
        *,
        status: AttendanceStatus,
        in_time: Optional[str],
        out_time: Optional[str],
        out_next_day: bool,
        shift: ShiftPolicy,
        hourly_rate: Optional[float],
    ) -> Financials:
        """Recompute hours and base pay only.

        Recorded deduction and OT amounts are carried over untouched.
        """

        fresh = self.compute(
            status=status,
            in_time=in_time,
            out_time=out_time,
            out_next_day=out_next_day,
            shift=shift,
            hourly_rate=hourly_rate,
        )
        return replace(
            existing,
            hours_worked=fresh.hours_worked,
            scheduled_hours=fresh.scheduled_hours,
            base_pay=fresh.base_pay,
            final_day_earning=final_day_earning(fresh.base_pay, existing.deduction, existing.ot_amount),
        )


_default_calculator = FinancialCalculator()


def compute_financials(
    *,
    status: AttendanceStatus,
    in_time: Optional[str],
    out_time: Optional[str],
    out_next_day: bool = False,
    shift: ShiftPolicy,
    hourly_rate: Optional[float],
    ot_hours: float = 0.0,
    ot_multiplier: float = DEFAULT_OT_MULTIPLIER,
    ot_details: Sequence[OtItem] = (),
    deduction: float = 0.0,
    deduction_details: Sequence[DeductionItem] = (),
) -> Financials:
    """Functional shortcut over the default calculator."""
    return _default_calculator.compute(
        status=status,
        in_time=in_time,
        out_time=out_time,
        out_next_day=out_next_day,
        shift=shift,
        hourly_rate=hourly_rate,
        ot=OtInput(hours=ot_hours, multiplier=ot_multiplier, details=tuple(ot_details)),
        deduction=DeductionInput(amount=deduction, details=tuple(deduction_details)),
    )
