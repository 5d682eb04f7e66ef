from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    task_id: str
    title: str
    team_id: str
    created_by_id: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self, *, comment_count: Optional[int] = None) -> dict:
        out = {
            "id": self.task_id,
            "title": self.title,
            "description": self.description,
            "teamId": self.team_id,
            "assigneeId": self.assignee_id,
            "createdById": self.created_by_id,
            "status": self.status.value,
            "priority": self.priority.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if comment_count is not None:
            out["commentCount"] = comment_count
        return out


@dataclass(frozen=True)
class TaskComment:
    """Append-only comment on a task."""

    comment_id: str
    task_id: str
    author_id: str
    content: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.comment_id,
            "taskId": self.task_id,
            "employeeId": self.author_id,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
        }
