from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import arg_text, current_principal, json_body, make_login_required
from ..container import Container

PREFIX = "/api/team-portal/leaves"


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)

    @app.get(PREFIX, endpoint="tp_leaves")
    @login_required
    def list_leaves():
        leaves = container.leave_service.list_for(
            principal=current_principal(),
            status=arg_text("status"),
            employee_id=arg_text("employeeId"),
        )
        return jsonify([lv.to_dict() for lv in leaves])

    @app.post(PREFIX, endpoint="tp_apply_leave")
    @login_required
    def apply_leave():
        data = json_body()
        leave = container.leave_service.apply(
            principal=current_principal(),
            leave_type=data.get("type") or "",
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            reason=data.get("reason") or "",
        )
        return jsonify(leave.to_dict()), 201

    @app.patch(f"{PREFIX}/<request_id>", endpoint="tp_decide_leave")
    @login_required
    def decide_leave(request_id: str):
        leave = container.leave_service.decide(
            principal=current_principal(),
            request_id=request_id,
            status=json_body().get("status"),
        )
        return jsonify(leave.to_dict())
