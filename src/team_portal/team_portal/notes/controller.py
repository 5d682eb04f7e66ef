from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import arg_text, current_principal, json_body, make_login_required, pick
from ..container import Container

PREFIX = "/api/team-portal/notes"

_NOTE_FIELDS = {"title": "title", "content": "content", "color": "color", "isPinned": "is_pinned"}


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)

    @app.get(PREFIX, endpoint="tp_notes")
    @login_required
    def list_notes():
        notes = container.note_service.list_notes(principal=current_principal(), search=arg_text("search"))
        return jsonify([n.to_dict() for n in notes])

    @app.post(PREFIX, endpoint="tp_create_note")
    @login_required
    def create_note():
        fields = pick(json_body(), _NOTE_FIELDS)
        note = container.note_service.create_note(
            principal=current_principal(), title=fields.pop("title", ""), **fields
        )
        return jsonify(note.to_dict()), 201

    @app.patch(f"{PREFIX}/<note_id>", endpoint="tp_update_note")
    @login_required
    def update_note(note_id: str):
        fields = pick(json_body(), _NOTE_FIELDS)
        note = container.note_service.update_note(principal=current_principal(), note_id=note_id, **fields)
        return jsonify(note.to_dict())

    @app.post(f"{PREFIX}/<note_id>/pin", endpoint="tp_toggle_note_pin")
    @login_required
    def toggle_pin(note_id: str):
        note = container.note_service.toggle_pin(principal=current_principal(), note_id=note_id)
        return jsonify(note.to_dict())

    @app.delete(f"{PREFIX}/<note_id>", endpoint="tp_delete_note")
    @login_required
    def delete_note(note_id: str):
        container.note_service.delete_note(principal=current_principal(), note_id=note_id)
        return "", 204
