from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_clock_repository import MySQLClockEntryRepository
from .attendance.repository import ClockEntryRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TOKEN_TTL_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .notes.mysql_note_repository import MySQLNoteRepository
from .notes.repository import NoteRepository
from .notes.service import NoteService
from .performance.service import PerformanceService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.repository import TeamRepository
from .teams.service import TeamService
from .uploads.service import UploadService
from .uploads.storage import LocalObjectStorage, ObjectStorage, RemoteObjectStorage


@dataclass(frozen=True)
class AuthSettings:
    secret: str
    algorithm: str = "HS256"
    ttl_days: int = DEFAULT_TOKEN_TTL_DAYS


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    teams_repo: TeamRepository
    entries_repo: ClockEntryRepository
    tasks_repo: TaskRepository
    leaves_repo: LeaveRepository
    notes_repo: NoteRepository
    reports_repo: ReportRepository

    auth_service: AuthService
    employee_service: EmployeeService
    team_service: TeamService
    attendance_service: AttendanceService
    task_service: TaskService
    leave_service: LeaveService
    note_service: NoteService
    report_service: ReportService
    upload_service: UploadService
    performance_service: PerformanceService


def assemble(
    *,
    employees_repo: EmployeeRepository,
    teams_repo: TeamRepository,
    entries_repo: ClockEntryRepository,
    tasks_repo: TaskRepository,
    leaves_repo: LeaveRepository,
    notes_repo: NoteRepository,
    reports_repo: ReportRepository,
    storage: ObjectStorage,
    auth: AuthSettings,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any repository implementations."""

    upload_service = UploadService(storage, secret=auth.secret, algorithm=auth.algorithm)
    return Container(
        conn=conn,
        employees_repo=employees_repo,
        teams_repo=teams_repo,
        entries_repo=entries_repo,
        tasks_repo=tasks_repo,
        leaves_repo=leaves_repo,
        notes_repo=notes_repo,
        reports_repo=reports_repo,
        auth_service=AuthService(
            employees_repo,
            teams_repo,
            secret=auth.secret,
            algorithm=auth.algorithm,
            ttl_days=auth.ttl_days,
        ),
        employee_service=EmployeeService(employees_repo),
        team_service=TeamService(teams_repo, employees_repo, tasks_repo, reports_repo),
        attendance_service=AttendanceService(entries_repo),
        task_service=TaskService(tasks_repo, teams_repo, employees_repo),
        leave_service=LeaveService(leaves_repo),
        note_service=NoteService(notes_repo),
        report_service=ReportService(reports_repo, teams_repo, upload_service),
        upload_service=upload_service,
        performance_service=PerformanceService(
            entries=entries_repo,
            tasks=tasks_repo,
            leaves=leaves_repo,
            employees=employees_repo,
            teams=teams_repo,
        ),
    )


def build_storage(*, uploads_dir: str, base_url: str = "", timeout: float = 30.0) -> ObjectStorage:
    if base_url:
        return RemoteObjectStorage(base_url, timeout=timeout)
    return LocalObjectStorage(uploads_dir)


def build_container(*, db_config: dict, auth: AuthSettings, storage: ObjectStorage) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        entries_repo=MySQLClockEntryRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        notes_repo=MySQLNoteRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        storage=storage,
        auth=auth,
    )
