from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.web import arg_text, current_principal, json_body, make_login_required, pick
from ..container import Container
from ..core.enums import ReportKind
from ..uploads.model import FilePayload

PREFIX = "/api/team-portal"

_COMMON_FIELDS = {
    "teamId": "team_id",
    "title": "title",
    "challenges": "challenges",
    "nextPlan": "next_plan",
    "hoursWorked": "hours_worked",
    "attachmentUrl": "attachment_url",
}

_KIND_FIELDS = {
    ReportKind.WEEKLY: {"weekStart": "week_start", "weekEnd": "week_end", "accomplishments": "body"},
    ReportKind.MONTHLY: {
        "month": "month",
        "summary": "summary_body",
        "achievements": "achievements",
        "tasksCompleted": "tasks_completed",
    },
}

_PERIOD_ARG = {ReportKind.WEEKLY: "weekStart", ReportKind.MONTHLY: "month"}


def _form_fields(kind: ReportKind) -> dict:
    """JSON body or multipart form, renamed to service keywords."""
    data = request.form.to_dict() if request.files or request.form else json_body()
    fields = pick(data, {**_COMMON_FIELDS, **_KIND_FIELDS[kind]})
    if "summary_body" in fields:
        fields["body"] = fields.pop("summary_body")
    return fields


def _uploaded_file() -> Optional[FilePayload]:
    f = request.files.get("file")
    if f is None or not f.filename:
        return None
    return FilePayload(
        file_name=f.filename,
        content_type=f.mimetype or "application/octet-stream",
        data=f.read(),
    )


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)
    service = container.report_service

    for kind in ReportKind:
        _register_kind(app, service, login_required, kind)


def _register_kind(app: Flask, service, login_required, kind: ReportKind) -> None:
    base = f"{PREFIX}/{kind.value}-reports"

    @login_required
    def list_reports():
        reports = service.list_reports(
            principal=current_principal(),
            kind=kind,
            team_id=arg_text("teamId"),
            employee_id=arg_text("employeeId"),
            period=arg_text(_PERIOD_ARG[kind]),
        )
        return jsonify([r.to_dict() for r in reports])

    @login_required
    def create_report():
        fields = _form_fields(kind)
        result = service.submit_report(
            principal=current_principal(),
            kind=kind,
            team_id=fields.pop("team_id", None),
            attachment=_uploaded_file(),
            **fields,
        )
        return jsonify(result.to_dict()), 201

    @login_required
    def get_report(report_id: str):
        return jsonify(service.get_report(principal=current_principal(), kind=kind, report_id=report_id).to_dict())

    @login_required
    def update_report(report_id: str):
        result = service.update_report(
            principal=current_principal(),
            kind=kind,
            report_id=report_id,
            attachment=_uploaded_file(),
            **_form_fields(kind),
        )
        return jsonify(result.to_dict())

    @login_required
    def delete_report(report_id: str):
        service.delete_report(principal=current_principal(), kind=kind, report_id=report_id)
        return "", 204

    app.add_url_rule(base, f"tp_{kind.value}_reports", list_reports, methods=["GET"])
    app.add_url_rule(base, f"tp_create_{kind.value}_report", create_report, methods=["POST"])
    app.add_url_rule(f"{base}/<report_id>", f"tp_{kind.value}_report", get_report, methods=["GET"])
    app.add_url_rule(f"{base}/<report_id>", f"tp_update_{kind.value}_report", update_report, methods=["PUT", "PATCH"])
    app.add_url_rule(f"{base}/<report_id>", f"tp_delete_{kind.value}_report", delete_report, methods=["DELETE"])
