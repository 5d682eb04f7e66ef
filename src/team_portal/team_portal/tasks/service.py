from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, optional_date
from ..common.ids import new_id
from ..common.validators import optional_text, require_non_empty
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Principal
from ..employees.repository import EmployeeRepository
from ..teams.repository import TeamRepository
from . import board
from .model import Task, TaskComment
from .repository import TaskRepository

logger = logging.getLogger(__name__)


def _parse_priority(value) -> TaskPriority:
    try:
        return TaskPriority.parse(value)
    except ValueError:
        raise ValidationError("Invalid priority")


class TaskService:
    """Task board use cases.

    Creating/deleting tasks needs full access; everything else needs access to
    the task's team. Status changes always go through ``board`` so only
    adjacent moves are possible, whoever the caller is.
    """

    def __init__(self, tasks: TaskRepository, teams: TeamRepository, employees: EmployeeRepository):
        self._tasks = tasks
        self._teams = teams
        self._employees = employees

    @staticmethod
    def _require_team_access(principal: Principal, team_id: str, message: str) -> None:
        if not principal.can_access_team(team_id):
            logger.warning("%s denied access to team %s", principal.employee_id, team_id)
            raise AuthorizationError(message)

    def _require_task(self, principal: Principal, task_id: str) -> Task:
        task = self._tasks.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        self._require_team_access(principal, task.team_id, "You don't have access to this task")
        return task

    def _require_assignee(self, assignee_id: Optional[str]) -> Optional[str]:
        assignee_id = optional_text(assignee_id)
        if assignee_id and not self._employees.get_by_id(assignee_id):
            raise ValidationError("Assignee not found")
        return assignee_id

    def create_task(
        self,
        *,
        principal: Principal,
        title: str,
        team_id: str,
        description: Optional[str] = None,
        assignee_id: Optional[str] = None,
        priority=None,
        due_date=None,
    ) -> Task:
        if not principal.is_full_access:
            raise AuthorizationError("Only admins with full access can create tasks")
        if not title or not str(title).strip() or not team_id:
            raise ValidationError("Title and team are required")
        if not self._teams.get_by_id(team_id):
            raise NotFoundError("Team not found")

        task = self._tasks.create(
            Task(
                task_id=new_id(),
                title=str(title).strip(),
                team_id=team_id,
                created_by_id=principal.employee_id,
                priority=_parse_priority(priority),
                description=optional_text(description),
                assignee_id=self._require_assignee(assignee_id),
                due_date=optional_date(due_date, "dueDate"),
            )
        )
        logger.info("task %s created in team %s", task.task_id, team_id)
        return task

    def get_task(self, *, principal: Principal, task_id: str) -> Task:
        return self._require_task(principal, task_id)

    def list_tasks(self, *, principal: Principal, team_id: Optional[str] = None) -> Sequence[Task]:
        if team_id:
            self._require_team_access(principal, team_id, "You don't have access to this team's tasks")
            return self._tasks.list_for_teams([team_id])
        if principal.is_full_access:
            return self._tasks.list_for_teams(None)
        return self._tasks.list_for_teams(sorted(principal.access_teams))

    def board(self, *, principal: Principal, team_id: str) -> dict[str, list[Task]]:
        """One team's tasks grouped into the three board columns."""
        columns: dict[str, list[Task]] = {s.value: [] for s in board.STATUS_ORDER}
        for task in self.list_tasks(principal=principal, team_id=team_id):
            columns[task.status.value].append(task)
        return columns

    def comment_counts(self, tasks: Sequence[Task]) -> dict[str, int]:
        counts = self._tasks.comment_counts([t.task_id for t in tasks])
        return {t.task_id: counts.get(t.task_id, 0) for t in tasks}

    def _status_changes(self, task: Task, target: TaskStatus, now: datetime) -> dict:
        board.ensure_transition(task.status, target)
        if target == task.status:
            return {}
        changes: dict = {"status": target}
        if target == TaskStatus.DONE:
            changes["completed_at"] = now
        elif task.status == TaskStatus.DONE:
            changes["completed_at"] = None
        return changes

    def update_task(self, *, principal: Principal, task_id: str, now: Optional[datetime] = None, **fields) -> Task:
        now = now or now_local()
        task = self._require_task(principal, task_id)

        changes: dict = {}
        if fields.get("title") is not None:
            changes["title"] = require_non_empty(fields["title"], "Title")
        if "description" in fields:
            changes["description"] = optional_text(fields["description"])
        if "assignee_id" in fields:
            changes["assignee_id"] = self._require_assignee(fields["assignee_id"])
        if fields.get("priority") is not None:
            changes["priority"] = _parse_priority(fields["priority"])
        if "due_date" in fields:
            changes["due_date"] = optional_date(fields["due_date"], "dueDate")
        if fields.get("status") is not None:
            changes.update(self._status_changes(task, board.parse_status(fields["status"]), now))

        if not changes:
            return task
        updated = self._tasks.update(task_id, changes)
        if not updated:
            raise NotFoundError("Task not found")
        if "status" in changes:
            logger.info("task %s moved %s -> %s", task_id, task.status.value, updated.status.value)
        return updated

    def update_task_status(self, *, principal: Principal, task_id: str, status, now: Optional[datetime] = None) -> Task:
        return self.update_task(principal=principal, task_id=task_id, status=status, now=now)

    def move_task(self, *, principal: Principal, task_id: str, direction: str, now: Optional[datetime] = None) -> Task:
        """One board-arrow step left or right."""
        task = self._require_task(principal, task_id)
        target = board.step(task.status, direction)
        return self.update_task(principal=principal, task_id=task_id, status=target, now=now)

    def delete_task(self, *, principal: Principal, task_id: str) -> None:
        if not principal.is_full_access:
            raise AuthorizationError("Only admins with full access can delete tasks")
        self._require_task(principal, task_id)
        if not self._tasks.delete(task_id):
            raise NotFoundError("Task not found")
        logger.info("task %s deleted by %s", task_id, principal.employee_id)

    def add_comment(
        self,
        *,
        principal: Principal,
        task_id: str,
        content: str,
        now: Optional[datetime] = None,
    ) -> TaskComment:
        self._require_task(principal, task_id)
        content = require_non_empty(content, "Content")
        return self._tasks.add_comment(
            TaskComment(
                comment_id=new_id(),
                task_id=task_id,
                author_id=principal.employee_id,
                content=content,
                created_at=now or now_local(),
            )
        )

    def list_comments(self, *, principal: Principal, task_id: str) -> Sequence[TaskComment]:
        self._require_task(principal, task_id)
        return self._tasks.list_comments(task_id)
