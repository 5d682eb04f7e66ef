from __future__ import annotations

import csv
import io

from flask import Flask, Response, jsonify

from ..common.datetime_utils import now_local
from ..common.web import arg_date, arg_text, current_principal, json_body, make_login_required
from ..container import Container
from .timesheet import EntryRow, elapsed_seconds, entry_minutes, format_duration, format_elapsed

PREFIX = "/api/team-portal/clock"


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.resolve_token)
    service = container.attendance_service

    def _rows(entries):
        now = now_local()
        return [EntryRow(entry=e, minutes=entry_minutes(e, now)).to_dict() for e in entries]

    @app.get(f"{PREFIX}/status", endpoint="tp_clock_status")
    @login_required
    def clock_status():
        status = service.get_clock_status(current_principal().employee_id)
        out = status.to_dict()
        if status.open_entry:
            out["elapsed"] = format_elapsed(elapsed_seconds(status.open_entry.clock_in, now_local()))
        out["break"] = service.break_status(current_principal())
        return jsonify(out)

    @app.post(f"{PREFIX}/in", endpoint="tp_clock_in")
    @login_required
    def clock_in():
        entry = service.clock_in(current_principal(), notes=json_body().get("notes"))
        return jsonify(entry.to_dict()), 201

    @app.post(f"{PREFIX}/out", endpoint="tp_clock_out")
    @login_required
    def clock_out():
        entry = service.clock_out(current_principal())
        out = entry.to_dict()
        out["duration"] = format_duration(entry.total_minutes or 0)
        return jsonify(out)

    @app.post(f"{PREFIX}/break/start", endpoint="tp_break_start")
    @login_required
    def break_start():
        return jsonify(service.start_break(current_principal()))

    @app.post(f"{PREFIX}/break/resume", endpoint="tp_break_resume")
    @login_required
    def break_resume():
        return jsonify(service.resume_work(current_principal()))

    @app.get(f"{PREFIX}/entries", endpoint="tp_clock_entries")
    @login_required
    def list_entries():
        entries = service.list_entries(
            current_principal(),
            employee_id=arg_text("employeeId"),
            start_date=arg_date("startDate"),
            end_date=arg_date("endDate"),
        )
        return jsonify(_rows(entries))

    @app.get(f"{PREFIX}/entries.csv", endpoint="tp_clock_entries_csv")
    @login_required
    def export_entries():
        entries = service.list_entries(
            current_principal(),
            employee_id=arg_text("employeeId"),
            start_date=arg_date("startDate"),
            end_date=arg_date("endDate"),
        )
        now = now_local()
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["date", "clock_in", "clock_out", "duration", "notes"])
        for e in sorted(entries, key=lambda x: x.clock_in):
            writer.writerow(
                [
                    e.work_date.isoformat(),
                    e.clock_in.strftime("%H:%M:%S"),
                    e.clock_out.strftime("%H:%M:%S") if e.clock_out else "",
                    format_duration(entry_minutes(e, now)),
                    e.notes or "",
                ]
            )
        return Response(
            buf.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=timesheet.csv"},
        )

    @app.get(f"{PREFIX}/all", endpoint="tp_clock_all")
    @login_required
    def list_all():
        entries = service.list_all_entries(
            current_principal(),
            start_date=arg_date("startDate"),
            end_date=arg_date("endDate"),
        )
        return jsonify(_rows(entries))

    @app.get(f"{PREFIX}/week", endpoint="tp_clock_week")
    @login_required
    def week():
        day = arg_date("date") or now_local().date()
        summary = service.week_summary(current_principal(), day=day, employee_id=arg_text("employeeId"))
        return jsonify(summary.to_dict())
