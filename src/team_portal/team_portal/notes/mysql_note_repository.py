from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PersonalNote
from .repository import NoteRepository

_COLUMNS = "id, employee_id, title, content, color, is_pinned, created_at, updated_at"
_UPDATABLE = {"title", "content", "color", "is_pinned"}


def _to_note(r: dict) -> PersonalNote:
    return PersonalNote(
        note_id=r["id"],
        employee_id=r["employee_id"],
        title=r["title"],
        content=r.get("content"),
        color=r["color"],
        is_pinned=bool(r["is_pinned"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLNoteRepository(NoteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, note_id: str) -> Optional[PersonalNote]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM personal_notes WHERE id=%s", (note_id,))
            r = fetchone(cur)
            return _to_note(r) if r else None

    def list_for_employee(self, employee_id: str) -> Sequence[PersonalNote]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM personal_notes
                WHERE employee_id=%s
                ORDER BY is_pinned DESC, created_at DESC
                """,
                (employee_id,),
            )
            return [_to_note(r) for r in fetchall(cur)]

    def create(self, note: PersonalNote) -> PersonalNote:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO personal_notes(id, employee_id, title, content, color, is_pinned, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    note.note_id,
                    note.employee_id,
                    note.title,
                    note.content,
                    note.color,
                    1 if note.is_pinned else 0,
                    note.created_at,
                    note.updated_at,
                ),
            )
        return self.get_by_id(note.note_id)

    def update(self, note_id: str, changes: dict) -> Optional[PersonalNote]:
        sets = ["updated_at=NOW()"]
        params: list[object] = []
        for column, value in changes.items():
            if column not in _UPDATABLE:
                raise ValueError(f"Unsupported note field: {column}")
            if column == "is_pinned":
                value = 1 if value else 0
            sets.append(f"{column}=%s")
            params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE personal_notes SET {', '.join(sets)} WHERE id=%s", tuple(params + [note_id]))
        return self.get_by_id(note_id)

    def delete(self, note_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM personal_notes WHERE id=%s", (note_id,))
            return cur.rowcount > 0
