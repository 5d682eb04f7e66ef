from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Team:
    team_id: str
    name: str
    description: Optional[str]
    color: str
    created_at: Optional[datetime] = None

    def to_dict(self, *, member_count: Optional[int] = None) -> dict:
        out = {
            "id": self.team_id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if member_count is not None:
            out["memberCount"] = member_count
        return out


@dataclass(frozen=True)
class TeamMembership:
    membership_id: str
    team_id: str
    employee_id: str
    role: str
    joined_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.membership_id,
            "teamId": self.team_id,
            "employeeId": self.employee_id,
            "role": self.role,
            "joinedAt": self.joined_at.isoformat() if self.joined_at else None,
        }
