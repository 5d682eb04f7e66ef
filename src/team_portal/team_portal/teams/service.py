from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.ids import new_id
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_MEMBER_ROLE, DEFAULT_TEAM_COLOR
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..employees.model import Principal
from ..employees.repository import EmployeeRepository
from ..reports.repository import ReportRepository
from ..tasks.repository import TaskRepository
from .model import Team, TeamMembership
from .repository import TeamRepository

logger = logging.getLogger(__name__)


class TeamService:
    """Use case: team CRUD and membership (mutations need full access)."""

    def __init__(
        self,
        teams: TeamRepository,
        employees: EmployeeRepository,
        tasks: TaskRepository,
        reports: ReportRepository,
    ):
        self._teams = teams
        self._employees = employees
        self._tasks = tasks
        self._reports = reports

    @staticmethod
    def _require_full(principal: Principal) -> None:
        if not principal.is_full_access:
            logger.warning("team mutation denied for %s", principal.employee_id)
            raise AuthorizationError("Insufficient permissions")

    def _require_team(self, team_id: str) -> Team:
        team = self._teams.get_by_id(team_id)
        if not team:
            raise NotFoundError("Team not found")
        return team

    def list_teams(self) -> list[dict]:
        counts = self._teams.member_counts()
        return [t.to_dict(member_count=counts.get(t.team_id, 0)) for t in self._teams.list_all()]

    def get_team(self, team_id: str) -> dict:
        team = self._require_team(team_id)
        return team.to_dict(member_count=len(self._teams.list_members(team_id)))

    def create_team(
        self,
        *,
        principal: Principal,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Team:
        self._require_full(principal)
        name = require_non_empty(name, "Team name")
        team = self._teams.create(
            Team(
                team_id=new_id(),
                name=name,
                description=optional_text(description),
                color=optional_text(color) or DEFAULT_TEAM_COLOR,
            )
        )
        logger.info("team %s created by %s", team.team_id, principal.employee_id)
        return team

    def update_team(self, *, principal: Principal, team_id: str, **fields) -> Team:
        self._require_full(principal)
        self._require_team(team_id)

        changes: dict = {}
        if fields.get("name") is not None:
            changes["name"] = require_non_empty(fields["name"], "Team name")
        if "description" in fields:
            changes["description"] = optional_text(fields["description"])
        if fields.get("color") is not None:
            changes["color"] = optional_text(fields["color"]) or DEFAULT_TEAM_COLOR

        updated = self._teams.update(team_id, changes)
        if not updated:
            raise NotFoundError("Team not found")
        return updated

    def delete_team(self, *, principal: Principal, team_id: str) -> None:
        """Restrict: a team that still owns tasks or reports cannot be deleted."""

        self._require_full(principal)
        self._require_team(team_id)

        if self._tasks.count_for_team(team_id) or self._reports.count_for_team(team_id):
            raise ConflictError("Team still has tasks or reports; move or delete them first")

        if not self._teams.delete(team_id):
            raise NotFoundError("Team not found")
        logger.info("team %s deleted by %s", team_id, principal.employee_id)

    def list_members(self, team_id: str) -> Sequence[TeamMembership]:
        self._require_team(team_id)
        return self._teams.list_members(team_id)

    def add_member(
        self,
        *,
        principal: Principal,
        team_id: str,
        employee_id: str,
        role: Optional[str] = None,
    ) -> TeamMembership:
        self._require_full(principal)
        self._require_team(team_id)
        employee_id = require_non_empty(employee_id, "Employee ID")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        role = optional_text(role) or DEFAULT_MEMBER_ROLE
        existing = self._teams.get_membership(team_id, employee_id)
        if existing:
            if existing.role == role:
                return existing
            return self._teams.set_member_role(team_id, employee_id, role)

        return self._teams.add_member(
            TeamMembership(membership_id=new_id(), team_id=team_id, employee_id=employee_id, role=role)
        )

    def remove_member(self, *, principal: Principal, team_id: str, employee_id: str) -> None:
        self._require_full(principal)
        if not self._teams.remove_member(team_id, employee_id):
            raise NotFoundError("Membership not found")
