from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from ..core.enums import ReportKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Report
from .repository import ReportRepository

_COMMON = "id, employee_id, team_id, title, challenges, next_plan, hours_worked, attachment_url, created_at, updated_at"

# kind -> (table, body column, period columns, filter column)
_TABLES = {
    ReportKind.WEEKLY: ("weekly_reports", "accomplishments", ("week_start", "week_end"), "week_start"),
    ReportKind.MONTHLY: ("monthly_reports", "summary", ("month",), "month"),
}

# Columns only one kind has.
_EXTRA_COLUMNS = {
    ReportKind.WEEKLY: (),
    ReportKind.MONTHLY: ("achievements", "tasks_completed"),
}

_UPDATABLE = {
    "title", "body", "challenges", "next_plan", "hours_worked", "attachment_url",
    "week_start", "week_end", "month", "team_id", "achievements", "tasks_completed",
}


def _select(kind: ReportKind) -> tuple[str, str]:
    table, body, period_cols, _ = _TABLES[kind]
    return table, ", ".join([_COMMON, f"{body} AS body", *period_cols, *_EXTRA_COLUMNS[kind]])


def _to_report(kind: ReportKind, r: dict) -> Report:
    return Report(
        report_id=r["id"],
        kind=kind,
        employee_id=r["employee_id"],
        team_id=r["team_id"],
        body=r.get("body") or "",
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        title=r.get("title"),
        week_start=r.get("week_start"),
        week_end=r.get("week_end"),
        month=r.get("month"),
        challenges=r.get("challenges"),
        next_plan=r.get("next_plan"),
        hours_worked=r.get("hours_worked"),
        attachment_url=r.get("attachment_url"),
        achievements=r.get("achievements"),
        tasks_completed=r.get("tasks_completed"),
    )


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, report: Report) -> Report:
        table, body_col, period_cols, _ = _TABLES[report.kind]
        period_values = [getattr(report, c) for c in period_cols]
        extra_cols = _EXTRA_COLUMNS[report.kind]
        columns = [
            "id", "employee_id", "team_id", "title", body_col, *period_cols,
            "challenges", "next_plan", "hours_worked", "attachment_url", "created_at", "updated_at",
            *extra_cols,
        ]
        values = [
            report.report_id,
            report.employee_id,
            report.team_id,
            report.title,
            report.body,
            *period_values,
            report.challenges,
            report.next_plan,
            report.hours_worked,
            report.attachment_url,
            report.created_at,
            report.updated_at,
            *(getattr(report, c) for c in extra_cols),
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {table}({', '.join(columns)}) VALUES({placeholders(values)})",
                tuple(values),
            )
        return self.get_by_id(report.kind, report.report_id)

    def get_by_id(self, kind: ReportKind, report_id: str) -> Optional[Report]:
        table, cols = _select(kind)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {cols} FROM {table} WHERE id=%s", (report_id,))
            r = fetchone(cur)
            return _to_report(kind, r) if r else None

    def list(
        self,
        kind: ReportKind,
        *,
        team_ids: Optional[Iterable[str]] = None,
        owner_id: Optional[str] = None,
        team_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        period: Optional[Any] = None,
    ) -> Sequence[Report]:
        table, cols = _select(kind)
        filter_col = _TABLES[kind][3]
        clauses: list[str] = []
        params: list[object] = []

        if team_ids is not None:
            ids = list(team_ids)
            scope: list[str] = []
            if ids:
                scope.append(f"team_id IN ({placeholders(ids)})")
                params.extend(ids)
            if owner_id:
                scope.append("employee_id=%s")
                params.append(owner_id)
            if not scope:
                return []
            clauses.append("(" + " OR ".join(scope) + ")")
        if team_id:
            clauses.append("team_id=%s")
            params.append(team_id)
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if period is not None:
            clauses.append(f"{filter_col}=%s")
            params.append(period)

        where = " AND ".join(clauses) if clauses else "1=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {cols} FROM {table} WHERE {where} ORDER BY created_at DESC", tuple(params))
            return [_to_report(kind, r) for r in fetchall(cur)]

    def update(self, kind: ReportKind, report_id: str, changes: dict) -> Optional[Report]:
        table, body_col, _, _ = _TABLES[kind]
        sets = ["updated_at=NOW()"]
        params: list[object] = []
        for field_name, value in changes.items():
            if field_name not in _UPDATABLE:
                raise ValueError(f"Unsupported report field: {field_name}")
            sets.append(f"{body_col if field_name == 'body' else field_name}=%s")
            params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE {table} SET {', '.join(sets)} WHERE id=%s", tuple(params + [report_id]))
        return self.get_by_id(kind, report_id)

    def delete(self, kind: ReportKind, report_id: str) -> bool:
        table = _TABLES[kind][0]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {table} WHERE id=%s", (report_id,))
            return cur.rowcount > 0

    def count_for_team(self, team_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM weekly_reports WHERE team_id=%s)
                  + (SELECT COUNT(*) FROM monthly_reports WHERE team_id=%s) AS n
                """,
                (team_id, team_id),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
