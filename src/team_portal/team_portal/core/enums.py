from __future__ import annotations

from enum import Enum


class AccessLevel(str, Enum):
    """How much data an employee may see and change."""

    FULL = "full"
    MULTI_TEAM = "multi_team"
    TEAM_ONLY = "team_only"


class TaskStatus(str, Enum):
    """Board columns, in board order."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value: str | None) -> "TaskPriority":
        """Case-insensitive; raises ValueError for anything else."""
        if not value:
            return cls.MEDIUM
        wanted = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Unknown priority: {value!r}")


class LeaveStatus(str, Enum):
    """Leave approval states; approved and rejected are final."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReportKind(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class UploadKind(str, Enum):
    CV = "cv"
    REPORT = "report"
    PORTFOLIO = "portfolio"
    AVATAR = "avatar"
    COVER = "cover"
