from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import ClockEntry


class ClockEntryRepository(Protocol):
    def get_open_entry(self, employee_id: str) -> Optional[ClockEntry]:
        raise NotImplementedError

    def create_entry(self, entry: ClockEntry) -> ClockEntry:
        """Insert an open entry.

        Implementations must refuse a second open entry for the same employee
        (ConflictError), even under concurrent requests.
        """

        raise NotImplementedError

    def close_entry(self, *, entry_id: str, clock_out: datetime, total_minutes: int) -> Optional[ClockEntry]:
        """Close an entry only if it is still open; None otherwise."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ClockEntry]:
        """Inclusive date filter, newest clock-in first."""

        raise NotImplementedError

    def list_all(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ClockEntry]:
        raise NotImplementedError
