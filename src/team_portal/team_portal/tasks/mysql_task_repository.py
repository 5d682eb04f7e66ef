from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Task, TaskComment
from .repository import TaskRepository

_COLUMNS = """
    id, title, description, team_id, assignee_id, created_by_id, status,
    priority, due_date, completed_at, created_at, updated_at
"""

_UPDATABLE = {
    "title": "title",
    "description": "description",
    "team_id": "team_id",
    "assignee_id": "assignee_id",
    "status": "status",
    "priority": "priority",
    "due_date": "due_date",
    "completed_at": "completed_at",
}


def _to_task(row: dict) -> Task:
    due = row.get("due_date")
    if isinstance(due, datetime):
        due = due.date()
    return Task(
        task_id=row["id"],
        title=row["title"],
        description=row.get("description"),
        team_id=row["team_id"],
        assignee_id=row.get("assignee_id"),
        created_by_id=row["created_by_id"],
        status=TaskStatus(row["status"]),
        priority=TaskPriority.parse(row["priority"]),
        due_date=due,
        completed_at=row.get("completed_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_comment(row: dict) -> TaskComment:
    return TaskComment(
        comment_id=row["id"],
        task_id=row["task_id"],
        author_id=row["employee_id"],
        content=row["content"],
        created_at=row["created_at"],
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: str) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE id=%s", (task_id,))
            row = fetchone(cur)
            return _to_task(row) if row else None

    def list_for_teams(self, team_ids: Optional[Iterable[str]] = None) -> Sequence[Task]:
        if team_ids is None:
            where, params = "1=1", ()
        else:
            ids = list(team_ids)
            if not ids:
                return []
            where, params = f"team_id IN ({placeholders(ids)})", tuple(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE {where} ORDER BY created_at DESC", params)
            return [_to_task(r) for r in fetchall(cur)]

    def create(self, task: Task) -> Task:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(
                    id, title, description, team_id, assignee_id, created_by_id,
                    status, priority, due_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task.task_id,
                    task.title,
                    task.description,
                    task.team_id,
                    task.assignee_id,
                    task.created_by_id,
                    task.status.value,
                    task.priority.value,
                    task.due_date,
                ),
            )
        return self.get_by_id(task.task_id)

    def update(self, task_id: str, changes: dict) -> Optional[Task]:
        sets = ["updated_at=NOW()"]
        params: list[object] = []
        for field_name, value in changes.items():
            column = _UPDATABLE.get(field_name)
            if column is None:
                raise ValueError(f"Unsupported task field: {field_name}")
            if isinstance(value, (TaskStatus, TaskPriority)):
                value = value.value
            sets.append(f"{column}=%s")
            params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE tasks SET {', '.join(sets)} WHERE id=%s", tuple(params + [task_id]))
        return self.get_by_id(task_id)

    def delete(self, task_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM task_comments WHERE task_id=%s", (task_id,))
            cur.execute("DELETE FROM tasks WHERE id=%s", (task_id,))
            return cur.rowcount > 0

    def count_for_team(self, team_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM tasks WHERE team_id=%s", (team_id,))
            return int(fetchone(cur)["n"])

    def add_comment(self, comment: TaskComment) -> TaskComment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task_comments(id, task_id, employee_id, content, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (comment.comment_id, comment.task_id, comment.author_id, comment.content, comment.created_at),
            )
        return comment

    def list_comments(self, task_id: str) -> Sequence[TaskComment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, task_id, employee_id, content, created_at
                FROM task_comments
                WHERE task_id=%s
                ORDER BY created_at ASC
                """,
                (task_id,),
            )
            return [_to_comment(r) for r in fetchall(cur)]

    def comment_counts(self, task_ids: Iterable[str]) -> dict[str, int]:
        ids = list(task_ids)
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT task_id, COUNT(*) AS n
                FROM task_comments
                WHERE task_id IN ({placeholders(ids)})
                GROUP BY task_id
                """,
                tuple(ids),
            )
            return {r["task_id"]: int(r["n"]) for r in fetchall(cur)}
