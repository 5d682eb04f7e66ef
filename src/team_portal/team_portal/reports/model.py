from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ReportKind
from ..core.exceptions import ValidationError


def ensure_complete(body: Optional[str], attachment_url: Optional[str]) -> None:
    """A report needs a non-blank body, an attachment, or both."""
    if not (body or "").strip() and not attachment_url:
        raise ValidationError("Please add a note or attach a file")


@dataclass(frozen=True)
class Report:
    report_id: str
    kind: ReportKind
    employee_id: str
    team_id: str
    body: str
    created_at: datetime
    updated_at: datetime
    title: Optional[str] = None
    week_start: Optional[date] = None
    week_end: Optional[date] = None
    month: Optional[str] = None
    challenges: Optional[str] = None
    next_plan: Optional[str] = None
    hours_worked: Optional[int] = None
    attachment_url: Optional[str] = None
    achievements: Optional[str] = None
    tasks_completed: Optional[int] = None

    def to_dict(self) -> dict:
        d = {
            "id": self.report_id,
            "kind": self.kind.value,
            "employeeId": self.employee_id,
            "teamId": self.team_id,
            "title": self.title,
            "challenges": self.challenges,
            "nextPlan": self.next_plan,
            "hoursWorked": self.hours_worked,
            "attachmentUrl": self.attachment_url,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.kind == ReportKind.WEEKLY:
            d["weekStart"] = self.week_start.isoformat() if self.week_start else None
            d["weekEnd"] = self.week_end.isoformat() if self.week_end else None
            d["accomplishments"] = self.body
        else:
            d["month"] = self.month
            d["summary"] = self.body
            d["achievements"] = self.achievements
            d["tasksCompleted"] = self.tasks_completed
        return d


@dataclass(frozen=True)
class SubmitResult:
    report: Report
    warning: Optional[str] = None

    def to_dict(self) -> dict:
        d = self.report.to_dict()
        if self.warning:
            d["warning"] = self.warning
        return d
