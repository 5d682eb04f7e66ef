from __future__ import annotations

import json
from typing import Optional, Sequence

from ..core.enums import AccessLevel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_list
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    id, email, name, password_hash, role, designation, phone, avatar_url,
    access_level, access_teams, is_active, created_at
"""

# Employee field -> column
_UPDATABLE = {
    "email": "email",
    "name": "name",
    "password_hash": "password_hash",
    "role": "role",
    "designation": "designation",
    "phone": "phone",
    "avatar_url": "avatar_url",
    "access_level": "access_level",
    "access_teams": "access_teams",
    "is_active": "is_active",
}


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=row["id"],
        email=row["email"],
        name=row["name"],
        password_hash=row["password_hash"],
        role=row["role"],
        access_level=AccessLevel(row["access_level"]),
        access_teams=tuple(load_json_list(row.get("access_teams"))),
        is_active=bool(row.get("is_active", True)),
        designation=row.get("designation"),
        phone=row.get("phone"),
        avatar_url=row.get("avatar_url"),
        created_at=row.get("created_at"),
    )


def _to_column_value(field_name: str, value):
    if field_name == "access_level":
        return AccessLevel(value).value
    if field_name == "access_teams":
        return json.dumps(list(value or []))
    if field_name == "is_active":
        return 1 if value else 0
    return value


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (employee_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email=%s", (email.lower(),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY created_at DESC")
            return [_to_employee(r) for r in fetchall(cur)]

    def create(self, employee: Employee) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    id, email, name, password_hash, role, designation, phone,
                    avatar_url, access_level, access_teams, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee.employee_id,
                    employee.email,
                    employee.name,
                    employee.password_hash,
                    employee.role,
                    employee.designation,
                    employee.phone,
                    employee.avatar_url,
                    employee.access_level.value,
                    json.dumps(list(employee.access_teams)),
                    1 if employee.is_active else 0,
                ),
            )
        return self.get_by_id(employee.employee_id)

    def update(self, employee_id: str, changes: dict) -> Optional[Employee]:
        sets: list[str] = []
        params: list[object] = []
        for field_name, value in changes.items():
            column = _UPDATABLE.get(field_name)
            if column is None:
                raise ValueError(f"Unsupported employee field: {field_name}")
            sets.append(f"{column}=%s")
            params.append(_to_column_value(field_name, value))

        if sets:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE employees SET {', '.join(sets)} WHERE id=%s",
                    tuple(params + [employee_id]),
                )
        return self.get_by_id(employee_id)
