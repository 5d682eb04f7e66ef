from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: str
    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def days(self) -> int:
        """Inclusive calendar days."""
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "employeeId": self.employee_id,
            "type": self.leave_type,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "days": self.days,
            "reason": self.reason,
            "status": self.status.value,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "createdAt": self.created_at.isoformat(),
        }
