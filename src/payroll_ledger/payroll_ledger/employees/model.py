from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import SalaryType
from ..shifts.model import ShiftPolicy


@dataclass(frozen=True)
class Employee:
    """Domain entity: one row of the employee directory.

    Note: The directory is owned by another service; this core only reads it.
    """

    employee_id: int
    employee_number: str
    first_name: str
    last_name: str
    department: str
    shift: ShiftPolicy
    hourly_rate: float
    monthly_salary: float = 0.0
    salary_type: SalaryType = SalaryType.HOURLY
    status: str = "Active"
    joining_date: Optional[date] = None
    is_archived: bool = False
    is_deleted: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == "Active" and not self.is_archived and not self.is_deleted
