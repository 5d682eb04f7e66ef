from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class ClockEntry:
    """Domain entity: one clock-in/clock-out span.

    ``clock_out is None`` means the entry is open (employee currently clocked in).
    ``work_date`` is the clock-in's calendar date, used for day bucketing.
    """

    entry_id: str
    employee_id: str
    clock_in: datetime
    clock_out: Optional[datetime]
    work_date: date
    notes: Optional[str] = None
    total_minutes: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "employeeId": self.employee_id,
            "clockIn": self.clock_in.isoformat(),
            "clockOut": self.clock_out.isoformat() if self.clock_out else None,
            "totalMinutes": self.total_minutes,
            "notes": self.notes,
            "date": self.work_date.isoformat(),
        }


@dataclass(frozen=True)
class ClockStatus:
    clocked_in: bool
    open_entry: Optional[ClockEntry] = None

    def to_dict(self) -> dict:
        return {
            "clockedIn": self.clocked_in,
            "clockEntry": self.open_entry.to_dict() if self.open_entry else None,
        }
