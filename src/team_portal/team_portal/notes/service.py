from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.ids import new_id
from ..common.validators import optional_text, require_bool, require_in, require_non_empty
from ..core.constants import DEFAULT_NOTE_COLOR, NOTE_COLORS
from ..core.exceptions import NotFoundError
from ..employees.model import Principal
from .model import PersonalNote, board_order
from .repository import NoteRepository


class NoteService:
    """Private notes. Someone else's note is reported as missing, never as forbidden."""

    def __init__(self, notes: NoteRepository):
        self._notes = notes

    def _require_own(self, principal: Principal, note_id: str) -> PersonalNote:
        note = self._notes.get_by_id(note_id)
        if not note or note.employee_id != principal.employee_id:
            raise NotFoundError("Note not found")
        return note

    def list_notes(self, *, principal: Principal, search: Optional[str] = None) -> Sequence[PersonalNote]:
        notes = self._notes.list_for_employee(principal.employee_id)
        term = (search or "").strip()
        if term:
            notes = [n for n in notes if n.matches(term)]
        return board_order(notes)

    def create_note(
        self,
        *,
        principal: Principal,
        title: str,
        content: Optional[str] = None,
        color: Optional[str] = None,
        is_pinned: Optional[bool] = False,
        now: Optional[datetime] = None,
    ) -> PersonalNote:
        now = now or now_local()
        return self._notes.create(
            PersonalNote(
                note_id=new_id(),
                employee_id=principal.employee_id,
                title=require_non_empty(title, "Title"),
                content=optional_text(content),
                color=require_in(color or DEFAULT_NOTE_COLOR, NOTE_COLORS, "color"),
                is_pinned=False if is_pinned is None else require_bool(is_pinned, "isPinned"),
                created_at=now,
                updated_at=now,
            )
        )

    def update_note(self, *, principal: Principal, note_id: str, **fields) -> PersonalNote:
        self._require_own(principal, note_id)

        changes: dict = {}
        if "title" in fields:
            changes["title"] = require_non_empty(fields["title"], "Title")
        if "content" in fields:
            changes["content"] = optional_text(fields["content"])
        if "color" in fields:
            changes["color"] = require_in(fields["color"], NOTE_COLORS, "color")
        if "is_pinned" in fields:
            changes["is_pinned"] = require_bool(fields["is_pinned"], "isPinned")

        if not changes:
            return self._notes.get_by_id(note_id)
        return self._notes.update(note_id, changes)

    def toggle_pin(self, *, principal: Principal, note_id: str) -> PersonalNote:
        note = self._require_own(principal, note_id)
        return self._notes.update(note_id, {"is_pinned": not note.is_pinned})

    def delete_note(self, *, principal: Principal, note_id: str) -> None:
        self._require_own(principal, note_id)
        self._notes.delete(note_id)
