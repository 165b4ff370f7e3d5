from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only view of the employee directory.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_by_numbers(self, employee_numbers: Iterable[str]) -> Sequence[Employee]:
        """Non-deleted employees whose employee number is in the given set."""

        raise NotImplementedError

    def list_active(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        """Active, non-archived, non-deleted employees ordered by employee number."""

        raise NotImplementedError
