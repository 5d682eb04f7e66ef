from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import arg_date, current_principal, make_login_required
from ..container import Container

PREFIX = "/api/team-portal"


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)
    service = container.performance_service

    @app.get(f"{PREFIX}/dashboard", endpoint="tp_dashboard")
    @login_required
    def dashboard():
        return jsonify(service.dashboard(current_principal()))

    @app.get(f"{PREFIX}/performance", endpoint="tp_my_performance")
    @login_required
    def my_performance():
        return jsonify(service.my_performance(current_principal(), today=arg_date("date")))

    @app.get(f"{PREFIX}/admin/performance", endpoint="tp_team_performance")
    @login_required
    def team_performance():
        return jsonify(service.team_performance(current_principal(), today=arg_date("date")))
