from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = "id, employee_id, type, start_date, end_date, reason, status, reviewed_by, reviewed_at, created_at"


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=r["id"],
        employee_id=r["employee_id"],
        leave_type=r["type"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(id, employee_id, type, start_date, end_date, reason, status, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.request_id,
                    request.employee_id,
                    request.leave_type,
                    request.start_date,
                    request.end_date,
                    request.reason,
                    request.status.value,
                    request.created_at,
                ),
            )
        return self.get_by_id(request.request_id)

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE id=%s", (request_id,))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 500,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: str,
        status: LeaveStatus,
        reviewed_by: str,
        reviewed_at: datetime,
    ) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s
                WHERE id=%s AND status=%s
                """,
                (status.value, reviewed_by, reviewed_at, request_id, LeaveStatus.PENDING.value),
            )
            ok = cur.rowcount > 0
        return self.get_by_id(request_id) if ok else None
