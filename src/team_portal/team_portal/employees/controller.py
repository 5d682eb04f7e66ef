from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required, pick
from ..container import Container

PREFIX = "/api/team-portal"

_EMPLOYEE_FIELDS = {
    "email": "email",
    "name": "name",
    "password": "password",
    "role": "role",
    "designation": "designation",
    "phone": "phone",
    "avatarUrl": "avatar_url",
    "accessLevel": "access_level",
    "accessTeams": "access_teams",
    "isActive": "is_active",
}

_PROFILE_FIELDS = {
    "name": "name",
    "designation": "designation",
    "phone": "phone",
    "avatarUrl": "avatar_url",
    "password": "password",
}


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)

    @app.post(f"{PREFIX}/login", endpoint="tp_login")
    def login():
        data = json_body()
        result = container.auth_service.authenticate(data.get("email") or "", data.get("password") or "")
        return jsonify(
            {
                "token": result.token,
                "employee": result.employee.to_public(),
                "principal": result.principal.to_dict(),
            }
        )

    @app.get(f"{PREFIX}/me", endpoint="tp_me")
    @login_required
    def me():
        employee = container.employee_service.get(current_principal().employee_id)
        return jsonify({**employee.to_public(), "principal": current_principal().to_dict()})

    @app.patch(f"{PREFIX}/me", endpoint="tp_update_me")
    @login_required
    def update_me():
        fields = pick(json_body(), _PROFILE_FIELDS)
        employee = container.employee_service.update_profile(principal=current_principal(), **fields)
        return jsonify(employee.to_public())

    @app.get(f"{PREFIX}/employees", endpoint="tp_employees")
    @login_required
    def list_employees():
        return jsonify([e.to_public() for e in container.employee_service.list_employees()])

    @app.post(f"{PREFIX}/employees", endpoint="tp_create_employee")
    @login_required
    def create_employee():
        fields = pick(json_body(), _EMPLOYEE_FIELDS)
        fields.pop("avatar_url", None)
        fields.pop("is_active", None)
        employee = container.employee_service.create_employee(
            principal=current_principal(),
            email=fields.pop("email", ""),
            name=fields.pop("name", ""),
            password=fields.pop("password", ""),
            **fields,
        )
        return jsonify(employee.to_public()), 201

    @app.patch(f"{PREFIX}/employees/<employee_id>", endpoint="tp_update_employee")
    @login_required
    def update_employee(employee_id: str):
        fields = pick(json_body(), _EMPLOYEE_FIELDS)
        employee = container.employee_service.update_employee(
            principal=current_principal(), employee_id=employee_id, **fields
        )
        return jsonify(employee.to_public())

    @app.delete(f"{PREFIX}/employees/<employee_id>", endpoint="tp_deactivate_employee")
    @login_required
    def deactivate_employee(employee_id: str):
        # Employees are never hard-deleted.
        employee = container.employee_service.set_active(
            principal=current_principal(), employee_id=employee_id, is_active=False
        )
        return jsonify(employee.to_public())
