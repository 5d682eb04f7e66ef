from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Task, TaskComment


class TaskRepository(Protocol):
    def get_by_id(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def list_for_teams(self, team_ids: Optional[Iterable[str]] = None) -> Sequence[Task]:
        """Tasks of the given teams (all teams when None), newest first."""

        raise NotImplementedError

    def create(self, task: Task) -> Task:
        raise NotImplementedError

    def update(self, task_id: str, changes: dict) -> Optional[Task]:
        """Apply field changes and bump ``updated_at``."""

        raise NotImplementedError

    def delete(self, task_id: str) -> bool:
        """Delete the task and its comments."""

        raise NotImplementedError

    def count_for_team(self, team_id: str) -> int:
        raise NotImplementedError

    # Comments
    def add_comment(self, comment: TaskComment) -> TaskComment:
        raise NotImplementedError

    def list_comments(self, task_id: str) -> Sequence[TaskComment]:
        """Oldest first."""

        raise NotImplementedError

    def comment_counts(self, task_ids: Iterable[str]) -> dict[str, int]:
        raise NotImplementedError
