from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import AccessLevel


@dataclass(frozen=True)
class Employee:
    """Domain entity: a Team Portal employee.

    Note: plain data object, no DB access. ``password_hash`` never leaves the
    service layer; use :meth:`to_public` for anything sent to a client.
    """

    employee_id: str
    email: str
    name: str
    password_hash: str
    role: str
    access_level: AccessLevel
    access_teams: tuple[str, ...] = ()
    is_active: bool = True
    designation: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_public(self) -> dict:
        return {
            "id": self.employee_id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "designation": self.designation,
            "phone": self.phone,
            "avatarUrl": self.avatar_url,
            "accessLevel": self.access_level.value,
            "accessTeams": list(self.access_teams),
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class Principal:
    """The acting employee, resolved from a bearer token for one request."""

    employee_id: str
    name: str
    access_level: AccessLevel
    access_teams: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_full_access(self) -> bool:
        return self.access_level == AccessLevel.FULL

    def can_access_team(self, team_id: str) -> bool:
        if self.is_full_access:
            return True
        return team_id in self.access_teams

    def can_manage(self, owner_id: str) -> bool:
        """Owner or full access."""
        return self.is_full_access or owner_id == self.employee_id

    def to_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "name": self.name,
            "accessLevel": self.access_level.value,
            "accessTeams": sorted(self.access_teams),
        }
