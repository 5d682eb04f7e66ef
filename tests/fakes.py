"""In-memory repositories and helpers shared by the tests."""

from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime, timedelta

from werkzeug.security import generate_password_hash

from src.team_portal.team_portal.container import AuthSettings, assemble
from src.team_portal.team_portal.core.enums import AccessLevel
from src.team_portal.team_portal.core.exceptions import ConflictError, UpstreamError
from src.team_portal.team_portal.employees.model import Employee, Principal
from src.team_portal.team_portal.teams.model import Team, TeamMembership
from src.team_portal.team_portal.uploads.model import StoredObject, UploadDestination

_clock = itertools.count()


def tick() -> datetime:
    """Strictly increasing timestamps so 'newest first' is deterministic."""
    return datetime(2026, 1, 1) + timedelta(seconds=next(_clock))


class FakeEmployeesRepo:
    def __init__(self):
        self._rows: dict[str, Employee] = {}

    def get_by_id(self, employee_id):
        return self._rows.get(employee_id)

    def get_by_email(self, email):
        return next((e for e in self._rows.values() if e.email == email.lower()), None)

    def list_all(self):
        return sorted(self._rows.values(), key=lambda e: e.name)

    def create(self, employee):
        if self.get_by_email(employee.email):
            raise ConflictError("Duplicate entry")
        employee = replace(employee, created_at=employee.created_at or tick())
        self._rows[employee.employee_id] = employee
        return employee

    def update(self, employee_id, changes):
        current = self._rows.get(employee_id)
        if not current:
            return None
        updated = replace(current, **changes)
        self._rows[employee_id] = updated
        return updated


class FakeTeamsRepo:
    def __init__(self):
        self._teams: dict[str, Team] = {}
        self._members: dict[tuple[str, str], TeamMembership] = {}

    def get_by_id(self, team_id):
        return self._teams.get(team_id)

    def list_all(self):
        return sorted(self._teams.values(), key=lambda t: t.name)

    def create(self, team):
        team = replace(team, created_at=team.created_at or tick())
        self._teams[team.team_id] = team
        return team

    def update(self, team_id, changes):
        current = self._teams.get(team_id)
        if not current:
            return None
        self._teams[team_id] = replace(current, **changes)
        return self._teams[team_id]

    def delete(self, team_id):
        if team_id not in self._teams:
            return False
        del self._teams[team_id]
        for key in [k for k in self._members if k[0] == team_id]:
            del self._members[key]
        return True

    def get_membership(self, team_id, employee_id):
        return self._members.get((team_id, employee_id))

    def add_member(self, membership):
        membership = replace(membership, joined_at=membership.joined_at or tick())
        self._members[(membership.team_id, membership.employee_id)] = membership
        return membership

    def set_member_role(self, team_id, employee_id, role):
        current = self._members.get((team_id, employee_id))
        if not current:
            return None
        self._members[(team_id, employee_id)] = replace(current, role=role)
        return self._members[(team_id, employee_id)]

    def remove_member(self, team_id, employee_id):
        return self._members.pop((team_id, employee_id), None) is not None

    def list_members(self, team_id):
        return [m for (t, _), m in self._members.items() if t == team_id]

    def team_ids_for_employee(self, employee_id):
        return [t for (t, e) in self._members if e == employee_id]

    def member_counts(self):
        counts: dict[str, int] = {}
        for team_id, _ in self._members:
            counts[team_id] = counts.get(team_id, 0) + 1
        return counts


class FakeClockEntriesRepo:
    def __init__(self):
        self._rows = {}

    def get_open_entry(self, employee_id):
        return next((e for e in self._rows.values() if e.employee_id == employee_id and e.is_open), None)

    def create_entry(self, entry):
        if self.get_open_entry(entry.employee_id):
            raise ConflictError("Duplicate entry")
        self._rows[entry.entry_id] = entry
        return entry

    def close_entry(self, *, entry_id, clock_out, total_minutes):
        current = self._rows.get(entry_id)
        if not current or not current.is_open:
            return None
        self._rows[entry_id] = replace(current, clock_out=clock_out, total_minutes=total_minutes)
        return self._rows[entry_id]

    def _in_range(self, e, start_date, end_date):
        return (start_date is None or e.work_date >= start_date) and (end_date is None or e.work_date <= end_date)

    def list_for_employee(self, employee_id, *, start_date=None, end_date=None):
        rows = [e for e in self._rows.values() if e.employee_id == employee_id and self._in_range(e, start_date, end_date)]
        return sorted(rows, key=lambda e: e.clock_in, reverse=True)

    def list_all(self, *, start_date=None, end_date=None):
        rows = [e for e in self._rows.values() if self._in_range(e, start_date, end_date)]
        return sorted(rows, key=lambda e: e.clock_in, reverse=True)


class FakeTasksRepo:
    def __init__(self):
        self._tasks = {}
        self._comments = {}

    def get_by_id(self, task_id):
        return self._tasks.get(task_id)

    def list_for_teams(self, team_ids=None):
        ids = None if team_ids is None else set(team_ids)
        rows = [t for t in self._tasks.values() if ids is None or t.team_id in ids]
        return sorted(rows, key=lambda t: t.created_at, reverse=True)

    def create(self, task):
        now = tick()
        task = replace(task, created_at=task.created_at or now, updated_at=task.updated_at or now)
        self._tasks[task.task_id] = task
        return task

    def update(self, task_id, changes):
        current = self._tasks.get(task_id)
        if not current:
            return None
        self._tasks[task_id] = replace(current, updated_at=tick(), **changes)
        return self._tasks[task_id]

    def delete(self, task_id):
        if self._tasks.pop(task_id, None) is None:
            return False
        for cid in [c for c, v in self._comments.items() if v.task_id == task_id]:
            del self._comments[cid]
        return True

    def count_for_team(self, team_id):
        return sum(1 for t in self._tasks.values() if t.team_id == team_id)

    def add_comment(self, comment):
        self._comments[comment.comment_id] = comment
        return comment

    def list_comments(self, task_id):
        rows = [c for c in self._comments.values() if c.task_id == task_id]
        return sorted(rows, key=lambda c: c.created_at)

    def comment_counts(self, task_ids):
        wanted = set(task_ids)
        counts: dict[str, int] = {}
        for c in self._comments.values():
            if c.task_id in wanted:
                counts[c.task_id] = counts.get(c.task_id, 0) + 1
        return counts


class FakeLeavesRepo:
    def __init__(self):
        self._rows = {}

    def create(self, request):
        self._rows[request.request_id] = request
        return request

    def get_by_id(self, request_id):
        return self._rows.get(request_id)

    def list(self, *, employee_id=None, status=None, limit=500):
        rows = [
            r
            for r in self._rows.values()
            if (employee_id is None or r.employee_id == employee_id) and (status is None or r.status == status)
        ]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)[:limit]

    def decide(self, *, request_id, status, reviewed_by, reviewed_at):
        current = self._rows.get(request_id)
        if not current or current.status.value != "pending":
            return None
        self._rows[request_id] = replace(current, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at)
        return self._rows[request_id]


class FakeNotesRepo:
    def __init__(self):
        self._rows = {}

    def get_by_id(self, note_id):
        return self._rows.get(note_id)

    def list_for_employee(self, employee_id):
        return [n for n in self._rows.values() if n.employee_id == employee_id]

    def create(self, note):
        self._rows[note.note_id] = note
        return note

    def update(self, note_id, changes):
        current = self._rows.get(note_id)
        if not current:
            return None
        self._rows[note_id] = replace(current, updated_at=tick(), **changes)
        return self._rows[note_id]

    def delete(self, note_id):
        return self._rows.pop(note_id, None) is not None


class FakeReportsRepo:
    def __init__(self):
        self._rows = {}

    def create(self, report):
        self._rows[(report.kind, report.report_id)] = report
        return report

    def get_by_id(self, kind, report_id):
        return self._rows.get((kind, report_id))

    def list(self, kind, *, team_ids=None, owner_id=None, team_id=None, employee_id=None, period=None):
        visible = None if team_ids is None else set(team_ids)
        out = []
        for (k, _), r in self._rows.items():
            if k != kind:
                continue
            if visible is not None and r.team_id not in visible and r.employee_id != owner_id:
                continue
            if team_id and r.team_id != team_id:
                continue
            if employee_id and r.employee_id != employee_id:
                continue
            if period is not None and (r.week_start if kind.value == "weekly" else r.month) != period:
                continue
            out.append(r)
        return sorted(out, key=lambda r: r.created_at, reverse=True)

    def update(self, kind, report_id, changes):
        current = self._rows.get((kind, report_id))
        if not current:
            return None
        self._rows[(kind, report_id)] = replace(current, updated_at=tick(), **changes)
        return self._rows[(kind, report_id)]

    def delete(self, kind, report_id):
        return self._rows.pop((kind, report_id), None) is not None

    def count_for_team(self, team_id):
        return sum(1 for r in self._rows.values() if r.team_id == team_id)


class FakeObjectStorage:
    """Records uploads; ``fail=True`` simulates an unreachable storage API."""

    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.objects: dict[str, bytes] = {}

    def request_destination(self, *, object_name, size, content_type, query=""):
        if self.fail:
            raise UpstreamError("Storage service unavailable")
        return UploadDestination(upload_url=f"https://storage.test/{object_name}", object_path=f"/objects/uploads/{object_name}")

    def put(self, destination, data, content_type):
        self.objects[destination.object_path.rsplit("/", 1)[-1]] = data

    def get(self, object_name):
        return StoredObject(data=self.objects[object_name], content_type="application/octet-stream")


def principal(employee_id="e1", *, level=AccessLevel.TEAM_ONLY, teams=()):
    return Principal(employee_id=employee_id, name=employee_id.upper(), access_level=level, access_teams=frozenset(teams))


def admin(employee_id="admin"):
    return principal(employee_id, level=AccessLevel.FULL)


def make_employee(employee_id, *, email=None, password="secret1", level=AccessLevel.TEAM_ONLY, teams=(), active=True):
    return Employee(
        employee_id=employee_id,
        email=email or f"{employee_id}@metaedge.test",
        name=employee_id.upper(),
        password_hash=generate_password_hash(password),
        role="employee",
        access_level=level,
        access_teams=tuple(teams),
        is_active=active,
    )


class Repos:
    def __init__(self, *, storage=None):
        self.employees = FakeEmployeesRepo()
        self.teams = FakeTeamsRepo()
        self.entries = FakeClockEntriesRepo()
        self.tasks = FakeTasksRepo()
        self.leaves = FakeLeavesRepo()
        self.notes = FakeNotesRepo()
        self.reports = FakeReportsRepo()
        self.storage = storage or FakeObjectStorage()

    def container(self):
        return assemble(
            employees_repo=self.employees,
            teams_repo=self.teams,
            entries_repo=self.entries,
            tasks_repo=self.tasks,
            leaves_repo=self.leaves,
            notes_repo=self.notes,
            reports_repo=self.reports,
            storage=self.storage,
            auth=AuthSettings(secret="test-jwt-secret"),
        )
