from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, week_bounds
from ..common.ids import new_id
from ..common.validators import optional_text
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.model import Principal
from .model import ClockEntry, ClockStatus
from .repository import ClockEntryRepository
from .timesheet import BreakTimer, WeekSummary, duration_minutes, format_elapsed, summarize_week

logger = logging.getLogger(__name__)


class AttendanceService:
    """Clock-in/clock-out lifecycle and timesheet queries.

    At most one open entry per employee: checked here, and again by the
    repository at insert time so concurrent sessions cannot both succeed.
    """

    def __init__(self, entries: ClockEntryRepository):
        self._entries = entries
        # Per-process, never persisted: breaks do not change worked minutes.
        self._breaks: dict[str, BreakTimer] = {}

    def get_clock_status(self, employee_id: str) -> ClockStatus:
        entry = self._entries.get_open_entry(employee_id)
        return ClockStatus(clocked_in=entry is not None, open_entry=entry)

    def clock_in(self, principal: Principal, *, notes: Optional[str] = None, now: Optional[datetime] = None) -> ClockEntry:
        now = now or now_local()
        employee_id = principal.employee_id

        if self._entries.get_open_entry(employee_id):
            raise ConflictError("You are already clocked in")

        entry = self._entries.create_entry(
            ClockEntry(
                entry_id=new_id(),
                employee_id=employee_id,
                clock_in=now,
                clock_out=None,
                work_date=now.date(),
                notes=optional_text(notes),
            )
        )
        logger.info("employee %s clocked in at %s", employee_id, now.isoformat())
        return entry

    def clock_out(self, principal: Principal, *, now: Optional[datetime] = None) -> ClockEntry:
        now = now or now_local()
        employee_id = principal.employee_id

        entry = self._entries.get_open_entry(employee_id)
        if not entry:
            raise NotFoundError("You are not clocked in")

        closed = self._entries.close_entry(
            entry_id=entry.entry_id,
            clock_out=now,
            total_minutes=duration_minutes(entry.clock_in, now, now),
        )
        if not closed:
            # Closed by another session between the read and the update.
            raise NotFoundError("You are not clocked in")
        self._breaks.pop(employee_id, None)
        logger.info("employee %s clocked out (%s min)", employee_id, closed.total_minutes)
        return closed

    def _target_employee(self, principal: Principal, employee_id: Optional[str]) -> str:
        if employee_id and employee_id != principal.employee_id and not principal.is_full_access:
            logger.warning("%s tried to read entries of %s", principal.employee_id, employee_id)
            raise AuthorizationError("You can only view your own time entries")
        return employee_id or principal.employee_id

    @staticmethod
    def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("endDate must not be before startDate")

    def list_entries(
        self,
        principal: Principal,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ClockEntry]:
        self._check_range(start_date, end_date)
        target = self._target_employee(principal, employee_id)
        return self._entries.list_for_employee(target, start_date=start_date, end_date=end_date)

    def list_all_entries(
        self,
        principal: Principal,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ClockEntry]:
        if not principal.is_full_access:
            raise AuthorizationError("Insufficient permissions")
        self._check_range(start_date, end_date)
        return self._entries.list_all(start_date=start_date, end_date=end_date)

    def week_summary(
        self,
        principal: Principal,
        *,
        day: date,
        employee_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> WeekSummary:
        now = now or now_local()
        target = self._target_employee(principal, employee_id)
        start, end = week_bounds(day)
        entries = self._entries.list_for_employee(target, start_date=start, end_date=end)
        return summarize_week(entries, day, now)

    # Breaks
    def start_break(self, principal: Principal, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        if not self._entries.get_open_entry(principal.employee_id):
            raise NotFoundError("You are not clocked in")
        timer = self._breaks.setdefault(principal.employee_id, BreakTimer())
        timer.start_break(now)
        return self.break_status(principal, now=now)

    def resume_work(self, principal: Principal, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        timer = self._breaks.get(principal.employee_id)
        if timer is None or not timer.is_on_break:
            raise ConflictError("You are not on a break")
        seconds = timer.resume_work(now)
        logger.info("employee %s resumed work after %ss break", principal.employee_id, seconds)
        return self.break_status(principal, now=now)

    def break_status(self, principal: Principal, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        timer = self._breaks.get(principal.employee_id) or BreakTimer()
        elapsed = timer.break_elapsed_seconds(now)
        return {
            "isOnBreak": timer.is_on_break,
            "breakStartedAt": timer.started_at.isoformat() if timer.started_at else None,
            "breakElapsed": format_elapsed(elapsed),
            "totalBreakSeconds": timer.total_break_seconds(now),
        }
