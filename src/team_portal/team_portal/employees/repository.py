from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, employee: Employee) -> Employee:
        raise NotImplementedError

    def update(self, employee_id: str, changes: dict) -> Optional[Employee]:
        """Apply column changes (keys are Employee field names)."""

        raise NotImplementedError
