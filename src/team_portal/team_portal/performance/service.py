from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..attendance.repository import ClockEntryRepository
from ..attendance.timesheet import entry_minutes, hours, summarize_range
from ..common.datetime_utils import month_start, now_local, week_bounds
from ..core.enums import LeaveStatus, TaskStatus
from ..core.exceptions import AuthorizationError
from ..employees.model import Principal
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from ..tasks.repository import TaskRepository
from ..teams.repository import TeamRepository


def completion_percent(done: int, total: int) -> int:
    return round(done * 100 / total) if total else 0


class PerformanceService:
    """Read-only aggregates for the dashboard and performance pages."""

    def __init__(
        self,
        *,
        entries: ClockEntryRepository,
        tasks: TaskRepository,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        teams: TeamRepository,
    ):
        self._entries = entries
        self._tasks = tasks
        self._leaves = leaves
        self._employees = employees
        self._teams = teams

    def _visible_tasks(self, principal: Principal):
        return self._tasks.list_for_teams(None if principal.is_full_access else principal.access_teams)

    def dashboard(self, principal: Principal, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        today = now.date()

        open_entry = self._entries.get_open_entry(principal.employee_id)
        today_entries = self._entries.list_for_employee(principal.employee_id, start_date=today, end_date=today)
        today_minutes = sum(entry_minutes(e, now) for e in today_entries)

        tasks = self._visible_tasks(principal)
        if principal.is_full_access:
            pending = self._leaves.list(status=LeaveStatus.PENDING)
        else:
            pending = self._leaves.list(employee_id=principal.employee_id, status=LeaveStatus.PENDING)

        out = {
            "clockedIn": open_entry is not None,
            "clockEntry": open_entry.to_dict() if open_entry else None,
            "todayHours": hours(today_minutes),
            "totalTasks": len(tasks),
            "openTasks": sum(1 for t in tasks if t.status != TaskStatus.DONE),
            "pendingLeaves": len(pending),
        }
        if principal.is_full_access:
            out["totalEmployees"] = sum(1 for e in self._employees.list_all() if e.is_active)
            out["totalTeams"] = len(self._teams.list_all())
        return out

    def my_performance(self, principal: Principal, *, today: Optional[date] = None, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        today = today or now.date()
        start, end = week_bounds(today)

        entries = self._entries.list_for_employee(principal.employee_id, start_date=start, end_date=end)
        days = summarize_range(entries, start, end, now)
        week_minutes = sum(d.total_minutes for d in days)
        worked_days = [d for d in days if d.total_minutes > 0]
        average = hours(week_minutes // len(worked_days)) if worked_days else 0.0

        tasks = self._visible_tasks(principal)
        if not principal.is_full_access:
            tasks = [t for t in tasks if t.assignee_id == principal.employee_id]
        done = sum(1 for t in tasks if t.status == TaskStatus.DONE)

        return {
            "weekStart": start.isoformat(),
            "weekEnd": end.isoformat(),
            "dailyHours": [{"date": d.day.isoformat(), "hours": hours(d.total_minutes)} for d in days],
            "weekHours": hours(week_minutes),
            "averageDailyHours": average,
            "tasksCompleted": done,
            "tasksTotal": len(tasks),
            "completionRate": completion_percent(done, len(tasks)),
        }

    def team_performance(self, principal: Principal, *, today: Optional[date] = None, now: Optional[datetime] = None) -> list[dict]:
        if not principal.is_full_access:
            raise AuthorizationError("Insufficient permissions")
        now = now or now_local()
        today = today or now.date()
        week_start, _ = week_bounds(today)
        first = month_start(today)
        range_start = min(week_start, first)

        by_employee: dict[str, list] = {}
        for e in self._entries.list_all(start_date=range_start, end_date=today + timedelta(days=6)):
            by_employee.setdefault(e.employee_id, []).append(e)

        tasks = self._tasks.list_for_teams(None)

        rows = []
        for emp in self._employees.list_all():
            if not emp.is_active:
                continue
            mine = by_employee.get(emp.employee_id, [])

            def minutes_since(day: date, until: Optional[date] = None) -> int:
                return sum(
                    entry_minutes(e, now)
                    for e in mine
                    if e.work_date >= day and (until is None or e.work_date <= until)
                )

            assigned = [t for t in tasks if t.assignee_id == emp.employee_id]
            done = sum(1 for t in assigned if t.status == TaskStatus.DONE)
            rows.append(
                {
                    "employeeId": emp.employee_id,
                    "name": emp.name,
                    "designation": emp.designation,
                    "todayHours": hours(minutes_since(today, today)),
                    "weekHours": hours(minutes_since(week_start, week_start + timedelta(days=6))),
                    "monthHours": hours(minutes_since(first, today)),
                    "tasksCompleted": done,
                    "tasksTotal": len(assigned),
                    "completionRate": completion_percent(done, len(assigned)),
                    "isOnline": self._entries.get_open_entry(emp.employee_id) is not None,
                }
            )
        rows.sort(key=lambda r: r["weekHours"], reverse=True)
        return rows
