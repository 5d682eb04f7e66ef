from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PersonalNote


class NoteRepository(Protocol):
    def get_by_id(self, note_id: str) -> Optional[PersonalNote]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str) -> Sequence[PersonalNote]:
        raise NotImplementedError

    def create(self, note: PersonalNote) -> PersonalNote:
        raise NotImplementedError

    def update(self, note_id: str, changes: dict) -> Optional[PersonalNote]:
        """Apply field changes and bump ``updated_at``."""

        raise NotImplementedError

    def delete(self, note_id: str) -> bool:
        raise NotImplementedError
