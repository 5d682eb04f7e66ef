from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(self, request: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 500,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: str,
        status: LeaveStatus,
        reviewed_by: str,
        reviewed_at: datetime,
    ) -> Optional[LeaveRequest]:
        """Set the decision only while the request is still pending; None otherwise."""

        raise NotImplementedError
