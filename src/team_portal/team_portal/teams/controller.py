from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required, pick
from ..container import Container

PREFIX = "/api/team-portal"


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)

    @app.get(f"{PREFIX}/teams", endpoint="tp_teams")
    @login_required
    def list_teams():
        return jsonify(container.team_service.list_teams())

    @app.post(f"{PREFIX}/teams", endpoint="tp_create_team")
    @login_required
    def create_team():
        data = json_body()
        team = container.team_service.create_team(
            principal=current_principal(),
            name=data.get("name") or "",
            description=data.get("description"),
            color=data.get("color"),
        )
        return jsonify(team.to_dict(member_count=0)), 201

    @app.get(f"{PREFIX}/teams/<team_id>", endpoint="tp_team")
    @login_required
    def get_team(team_id: str):
        return jsonify(container.team_service.get_team(team_id))

    @app.patch(f"{PREFIX}/teams/<team_id>", endpoint="tp_update_team")
    @login_required
    def update_team(team_id: str):
        fields = pick(json_body(), {"name": "name", "description": "description", "color": "color"})
        team = container.team_service.update_team(principal=current_principal(), team_id=team_id, **fields)
        return jsonify(team.to_dict())

    @app.delete(f"{PREFIX}/teams/<team_id>", endpoint="tp_delete_team")
    @login_required
    def delete_team(team_id: str):
        container.team_service.delete_team(principal=current_principal(), team_id=team_id)
        return "", 204

    @app.get(f"{PREFIX}/teams/<team_id>/members", endpoint="tp_team_members")
    @login_required
    def list_members(team_id: str):
        employees = {e.employee_id: e for e in container.employee_service.list_employees()}
        out = []
        for m in container.team_service.list_members(team_id):
            d = m.to_dict()
            emp = employees.get(m.employee_id)
            d["employee"] = emp.to_public() if emp else None
            out.append(d)
        return jsonify(out)

    @app.post(f"{PREFIX}/teams/<team_id>/members", endpoint="tp_add_member")
    @login_required
    def add_member(team_id: str):
        data = json_body()
        membership = container.team_service.add_member(
            principal=current_principal(),
            team_id=team_id,
            employee_id=data.get("employeeId") or "",
            role=data.get("role"),
        )
        return jsonify(membership.to_dict()), 201

    @app.delete(f"{PREFIX}/teams/<team_id>/members/<employee_id>", endpoint="tp_remove_member")
    @login_required
    def remove_member(team_id: str, employee_id: str):
        container.team_service.remove_member(principal=current_principal(), team_id=team_id, employee_id=employee_id)
        return "", 204
