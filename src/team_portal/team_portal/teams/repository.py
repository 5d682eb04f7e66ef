from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Team, TeamMembership


class TeamRepository(Protocol):
    def get_by_id(self, team_id: str) -> Optional[Team]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Team]:
        raise NotImplementedError

    def create(self, team: Team) -> Team:
        raise NotImplementedError

    def update(self, team_id: str, changes: dict) -> Optional[Team]:
        raise NotImplementedError

    def delete(self, team_id: str) -> bool:
        """Delete the team and its memberships."""

        raise NotImplementedError

    # Memberships
    def get_membership(self, team_id: str, employee_id: str) -> Optional[TeamMembership]:
        raise NotImplementedError

    def add_member(self, membership: TeamMembership) -> TeamMembership:
        raise NotImplementedError

    def set_member_role(self, team_id: str, employee_id: str, role: str) -> Optional[TeamMembership]:
        raise NotImplementedError

    def remove_member(self, team_id: str, employee_id: str) -> bool:
        raise NotImplementedError

    def list_members(self, team_id: str) -> Sequence[TeamMembership]:
        raise NotImplementedError

    def team_ids_for_employee(self, employee_id: str) -> Sequence[str]:
        raise NotImplementedError

    def member_counts(self) -> dict[str, int]:
        """team_id -> member count, derived at read time."""

        raise NotImplementedError
