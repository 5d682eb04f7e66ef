from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PersonalNote:
    note_id: str
    employee_id: str
    title: str
    content: Optional[str]
    color: str
    is_pinned: bool
    created_at: datetime
    updated_at: datetime

    def matches(self, term: str) -> bool:
        term = term.lower()
        return term in self.title.lower() or term in (self.content or "").lower()

    def to_dict(self) -> dict:
        return {
            "id": self.note_id,
            "employeeId": self.employee_id,
            "title": self.title,
            "content": self.content,
            "color": self.color,
            "isPinned": self.is_pinned,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


def board_order(notes) -> list[PersonalNote]:
    """Pinned first, newest first within each group."""
    by_recency = sorted(notes, key=lambda n: n.created_at, reverse=True)
    return sorted(by_recency, key=lambda n: not n.is_pinned)
