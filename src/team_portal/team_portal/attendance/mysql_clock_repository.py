from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClockEntry
from .repository import ClockEntryRepository

_COLUMNS = "id, employee_id, clock_in, clock_out, total_minutes, notes, date"


def _to_entry(row: dict) -> ClockEntry:
    work_date = row["date"]
    if isinstance(work_date, datetime):
        work_date = work_date.date()
    return ClockEntry(
        entry_id=row["id"],
        employee_id=row["employee_id"],
        clock_in=row["clock_in"],
        clock_out=row.get("clock_out"),
        work_date=work_date,
        notes=row.get("notes"),
        total_minutes=(int(row["total_minutes"]) if row.get("total_minutes") is not None else None),
    )


def _date_clauses(start_date: Optional[date], end_date: Optional[date]) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start_date is not None:
        clauses.append("date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("date <= %s")
        params.append(end_date)
    return clauses, params


class MySQLClockEntryRepository(ClockEntryRepository):
    """Open-entry uniqueness comes from the ``uq_clock_open`` key (see schema.sql);
    the duplicate-key error surfaces as ConflictError from ``db_cursor``."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, entry_id: str) -> Optional[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clock_entries WHERE id=%s", (entry_id,))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def get_open_entry(self, employee_id: str) -> Optional[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_entries
                WHERE employee_id=%s AND clock_out IS NULL
                LIMIT 1
                """,
                (employee_id,),
            )
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def create_entry(self, entry: ClockEntry) -> ClockEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clock_entries(id, employee_id, clock_in, notes, date)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (entry.entry_id, entry.employee_id, entry.clock_in, entry.notes, entry.work_date),
            )
        return self._get(entry.entry_id)

    def close_entry(self, *, entry_id: str, clock_out: datetime, total_minutes: int) -> Optional[ClockEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_entries
                SET clock_out=%s, total_minutes=%s
                WHERE id=%s AND clock_out IS NULL
                """,
                (clock_out, int(total_minutes), entry_id),
            )
            closed = cur.rowcount > 0
        return self._get(entry_id) if closed else None

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ClockEntry]:
        clauses, params = _date_clauses(start_date, end_date)
        where = " AND ".join(["employee_id=%s"] + clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM clock_entries WHERE {where} ORDER BY clock_in DESC",
                tuple([employee_id] + params),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_all(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ClockEntry]:
        clauses, params = _date_clauses(start_date, end_date)
        where = " AND ".join(clauses or ["1=1"])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM clock_entries WHERE {where} ORDER BY clock_in DESC",
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]
