from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Team, TeamMembership
from .repository import TeamRepository

_UPDATABLE = {"name", "description", "color"}


def _to_team(row: dict) -> Team:
    return Team(
        team_id=row["id"],
        name=row["name"],
        description=row.get("description"),
        color=row["color"],
        created_at=row.get("created_at"),
    )


def _to_membership(row: dict) -> TeamMembership:
    return TeamMembership(
        membership_id=row["id"],
        team_id=row["team_id"],
        employee_id=row["employee_id"],
        role=row["role"],
        joined_at=row.get("joined_at"),
    )


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, team_id: str) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, description, color, created_at FROM teams WHERE id=%s", (team_id,))
            row = fetchone(cur)
            return _to_team(row) if row else None

    def list_all(self) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, description, color, created_at FROM teams ORDER BY created_at ASC")
            return [_to_team(r) for r in fetchall(cur)]

    def create(self, team: Team) -> Team:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO teams(id, name, description, color) VALUES(%s,%s,%s,%s)",
                (team.team_id, team.name, team.description, team.color),
            )
        return self.get_by_id(team.team_id)

    def update(self, team_id: str, changes: dict) -> Optional[Team]:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported team fields: {sorted(unknown)}")
        if changes:
            sets = ", ".join(f"{k}=%s" for k in changes)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE teams SET {sets} WHERE id=%s", tuple(list(changes.values()) + [team_id]))
        return self.get_by_id(team_id)

    def delete(self, team_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM team_memberships WHERE team_id=%s", (team_id,))
            cur.execute("DELETE FROM teams WHERE id=%s", (team_id,))
            return cur.rowcount > 0

    def get_membership(self, team_id: str, employee_id: str) -> Optional[TeamMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, team_id, employee_id, role, joined_at
                FROM team_memberships
                WHERE team_id=%s AND employee_id=%s
                """,
                (team_id, employee_id),
            )
            row = fetchone(cur)
            return _to_membership(row) if row else None

    def add_member(self, membership: TeamMembership) -> TeamMembership:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO team_memberships(id, team_id, employee_id, role) VALUES(%s,%s,%s,%s)",
                (membership.membership_id, membership.team_id, membership.employee_id, membership.role),
            )
        return self.get_membership(membership.team_id, membership.employee_id)

    def set_member_role(self, team_id: str, employee_id: str, role: str) -> Optional[TeamMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE team_memberships SET role=%s WHERE team_id=%s AND employee_id=%s",
                (role, team_id, employee_id),
            )
        return self.get_membership(team_id, employee_id)

    def remove_member(self, team_id: str, employee_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM team_memberships WHERE team_id=%s AND employee_id=%s",
                (team_id, employee_id),
            )
            return cur.rowcount > 0

    def list_members(self, team_id: str) -> Sequence[TeamMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, team_id, employee_id, role, joined_at
                FROM team_memberships
                WHERE team_id=%s
                ORDER BY joined_at ASC
                """,
                (team_id,),
            )
            return [_to_membership(r) for r in fetchall(cur)]

    def team_ids_for_employee(self, employee_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT team_id FROM team_memberships WHERE employee_id=%s", (employee_id,))
            return [r["team_id"] for r in fetchall(cur)]

    def member_counts(self) -> dict[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT team_id, COUNT(*) AS n FROM team_memberships GROUP BY team_id")
            return {r["team_id"]: int(r["n"]) for r in fetchall(cur)}
