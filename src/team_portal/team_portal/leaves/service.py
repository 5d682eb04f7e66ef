from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, require_date
from ..common.ids import new_id
from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.model import Principal
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

DECISIONS = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})


class LeaveService:
    """Leave workflow: pending -> approved | rejected, nothing after that."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def apply(
        self,
        *,
        principal: Principal,
        leave_type: str,
        start_date,
        end_date,
        reason: str,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        if not leave_type or not start_date or not end_date or not reason:
            raise ValidationError("All fields are required")

        start = require_date(start_date, "startDate")
        end = require_date(end_date, "endDate")
        if end < start:
            raise ValidationError("endDate must not be before startDate")

        leave = self._leaves.create(
            LeaveRequest(
                request_id=new_id(),
                employee_id=principal.employee_id,
                leave_type=require_non_empty(leave_type, "Type"),
                start_date=start,
                end_date=end,
                reason=require_non_empty(reason, "Reason"),
                status=LeaveStatus.PENDING,
                created_at=now or now_local(),
            )
        )
        logger.info("leave %s submitted by %s", leave.request_id, principal.employee_id)
        return leave

    def list_mine(self, *, principal: Principal, status=None) -> Sequence[LeaveRequest]:
        return self._leaves.list(employee_id=principal.employee_id, status=self._parse_status(status))

    def list_all(self, *, principal: Principal, status=None, employee_id: Optional[str] = None) -> Sequence[LeaveRequest]:
        if not principal.is_full_access:
            raise AuthorizationError("Insufficient permissions")
        return self._leaves.list(employee_id=employee_id or None, status=self._parse_status(status))

    def list_for(self, *, principal: Principal, status=None, employee_id: Optional[str] = None) -> Sequence[LeaveRequest]:
        """Full access sees everything (optionally filtered); everyone else only their own."""
        if principal.is_full_access:
            return self.list_all(principal=principal, status=status, employee_id=employee_id)
        return self.list_mine(principal=principal, status=status)

    @staticmethod
    def _parse_status(value) -> Optional[LeaveStatus]:
        if value is None or value == "":
            return None
        try:
            return LeaveStatus(value)
        except ValueError:
            raise ValidationError("Invalid status")

    def decide(
        self,
        *,
        principal: Principal,
        request_id: str,
        status,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        """Approve or reject a pending request.

        Repeating the decision already taken returns the request unchanged;
        any other change to a decided request is a ConflictError.
        """

        if not principal.is_full_access:
            raise AuthorizationError("Insufficient permissions")

        target = self._parse_status(status)
        if target not in DECISIONS:
            raise ValidationError("Invalid status")

        current = self._leaves.get_by_id(request_id)
        if not current:
            raise NotFoundError("Leave request not found")
        if current.status == target:
            return current
        if current.status != LeaveStatus.PENDING:
            raise ConflictError(f"Leave request is already {current.status.value}")

        decided = self._leaves.decide(
            request_id=request_id,
            status=target,
            reviewed_by=principal.employee_id,
            reviewed_at=now or now_local(),
        )
        if not decided:
            # Decided concurrently by someone else.
            latest = self._leaves.get_by_id(request_id)
            if latest and latest.status == target:
                return latest
            raise ConflictError("Leave request has already been decided")

        logger.info("leave %s %s by %s", request_id, target.value, principal.employee_id)
        return decided
