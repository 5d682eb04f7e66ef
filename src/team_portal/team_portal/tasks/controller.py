from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import arg_text, current_principal, json_body, make_login_required, pick
from ..container import Container

PREFIX = "/api/team-portal/tasks"

_TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "assigneeId": "assignee_id",
    "priority": "priority",
    "dueDate": "due_date",
    "status": "status",
}


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)
    service = container.task_service

    def _with_counts(tasks):
        counts = service.comment_counts(tasks)
        return [t.to_dict(comment_count=counts[t.task_id]) for t in tasks]

    @app.get(PREFIX, endpoint="tp_tasks")
    @login_required
    def list_tasks():
        tasks = service.list_tasks(principal=current_principal(), team_id=arg_text("teamId"))
        return jsonify(_with_counts(tasks))

    @app.get(f"{PREFIX}/board", endpoint="tp_task_board")
    @login_required
    def task_board():
        columns = service.board(principal=current_principal(), team_id=arg_text("teamId") or "")
        return jsonify({status: _with_counts(tasks) for status, tasks in columns.items()})

    @app.post(PREFIX, endpoint="tp_create_task")
    @login_required
    def create_task():
        data = json_body()
        task = service.create_task(
            principal=current_principal(),
            title=data.get("title") or "",
            team_id=data.get("teamId") or "",
            description=data.get("description"),
            assignee_id=data.get("assigneeId"),
            priority=data.get("priority"),
            due_date=data.get("dueDate"),
        )
        return jsonify(task.to_dict(comment_count=0)), 201

    @app.get(f"{PREFIX}/<task_id>", endpoint="tp_task")
    @login_required
    def get_task(task_id: str):
        task = service.get_task(principal=current_principal(), task_id=task_id)
        return jsonify(_with_counts([task])[0])

    @app.patch(f"{PREFIX}/<task_id>", endpoint="tp_update_task")
    @login_required
    def update_task(task_id: str):
        fields = pick(json_body(), _TASK_FIELDS)
        task = service.update_task(principal=current_principal(), task_id=task_id, **fields)
        return jsonify(task.to_dict())

    @app.post(f"{PREFIX}/<task_id>/move", endpoint="tp_move_task")
    @login_required
    def move_task(task_id: str):
        direction = json_body().get("direction") or ""
        task = service.move_task(principal=current_principal(), task_id=task_id, direction=direction)
        return jsonify(task.to_dict())

    @app.delete(f"{PREFIX}/<task_id>", endpoint="tp_delete_task")
    @login_required
    def delete_task(task_id: str):
        service.delete_task(principal=current_principal(), task_id=task_id)
        return "", 204

    @app.get(f"{PREFIX}/<task_id>/comments", endpoint="tp_task_comments")
    @login_required
    def list_comments(task_id: str):
        comments = service.list_comments(principal=current_principal(), task_id=task_id)
        return jsonify([c.to_dict() for c in comments])

    @app.post(f"{PREFIX}/<task_id>/comments", endpoint="tp_add_comment")
    @login_required
    def add_comment(task_id: str):
        comment = service.add_comment(
            principal=current_principal(), task_id=task_id, content=json_body().get("content") or ""
        )
        return jsonify(comment.to_dict()), 201
