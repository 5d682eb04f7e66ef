from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import now_local
from ..common.ids import new_id
from ..common.validators import optional_non_negative_int, optional_text
from ..core.enums import ReportKind, UploadKind
from ..core.exceptions import AuthorizationError, NotFoundError, UpstreamError, ValidationError
from ..employees.model import Principal
from ..teams.repository import TeamRepository
from ..uploads.model import FilePayload
from .model import Report, SubmitResult, ensure_complete
from .periods import parse_kind, period_for
from .repository import ReportRepository

logger = logging.getLogger(__name__)

UPLOAD_FAILED_WARNING = "Attachment could not be uploaded; the report was saved without it"

_TEXT_FIELDS = ("title", "challenges", "next_plan")


def _monthly_fields(kind: ReportKind, fields: dict) -> dict:
    """``achievements`` and ``tasks_completed`` exist on monthly reports only."""
    if kind != ReportKind.MONTHLY:
        return {}
    out: dict = {}
    if "achievements" in fields:
        out["achievements"] = optional_text(fields["achievements"])
    if "tasks_completed" in fields:
        out["tasks_completed"] = optional_non_negative_int(fields["tasks_completed"], "tasksCompleted")
    return out


class AttachmentStore(Protocol):
    def upload(self, kind, payload: FilePayload) -> str:
        """Store ``payload``; returns the object path to keep on the report."""
        raise NotImplementedError


class ReportService:
    def __init__(self, reports: ReportRepository, teams: TeamRepository, attachments: Optional[AttachmentStore] = None):
        self._reports = reports
        self._teams = teams
        self._attachments = attachments

    def _require_team(self, principal: Principal, team_id: Optional[str]) -> str:
        if not team_id:
            raise ValidationError("Team is required")
        if not self._teams.get_by_id(team_id):
            raise NotFoundError("Team not found")
        if not principal.can_access_team(team_id):
            logger.warning("%s denied reporting for team %s", principal.employee_id, team_id)
            raise AuthorizationError("You don't have access to this team")
        return team_id

    def _upload(self, attachment: Optional[FilePayload]) -> tuple[Optional[str], Optional[str]]:
        """Returns (object_path, warning)."""
        if attachment is None:
            return None, None
        if self._attachments is None:
            raise UpstreamError("File storage is not configured")
        try:
            return self._attachments.upload(UploadKind.REPORT, attachment), None
        except UpstreamError as e:
            logger.warning("report attachment upload failed, continuing without it: %s", e)
            return None, UPLOAD_FAILED_WARNING

    def submit_report(
        self,
        *,
        principal: Principal,
        kind,
        team_id: Optional[str],
        body: Optional[str] = None,
        attachment: Optional[FilePayload] = None,
        attachment_url: Optional[str] = None,
        hours_worked=None,
        now: Optional[datetime] = None,
        **fields,
    ) -> SubmitResult:
        """Create a weekly or monthly report.

        Period fields go in ``fields`` (``week_start``/``week_end`` or
        ``month``) together with the optional ``title``, ``challenges`` and
        ``next_plan``. Validation happens before the upload so a bad form
        never leaves an orphaned file behind.
        """

        kind = parse_kind(kind)
        team_id = self._require_team(principal, team_id)
        period = period_for(kind).parse(fields)
        hours = optional_non_negative_int(hours_worked, "hoursWorked")
        body = (body or "").strip()
        attachment_url = optional_text(attachment_url)
        ensure_complete(body, attachment_url or (attachment.file_name if attachment else None))

        warning = None
        if attachment is not None:
            uploaded, warning = self._upload(attachment)
            attachment_url = uploaded or attachment_url
            ensure_complete(body, attachment_url)

        now = now or now_local()
        report = self._reports.create(
            Report(
                report_id=new_id(),
                kind=kind,
                employee_id=principal.employee_id,
                team_id=team_id,
                body=body,
                created_at=now,
                updated_at=now,
                hours_worked=hours,
                attachment_url=attachment_url,
                **{f: optional_text(fields.get(f)) for f in _TEXT_FIELDS},
                **_monthly_fields(kind, fields),
                **period,
            )
        )
        logger.info("%s report %s submitted by %s", kind.value, report.report_id, principal.employee_id)
        return SubmitResult(report=report, warning=warning)

    def _require_visible(self, principal: Principal, kind: ReportKind, report_id: str) -> Report:
        report = self._reports.get_by_id(kind, report_id)
        if not report:
            raise NotFoundError("Report not found")
        if report.employee_id != principal.employee_id and not principal.can_access_team(report.team_id):
            raise NotFoundError("Report not found")
        return report

    def _require_manageable(self, principal: Principal, kind: ReportKind, report_id: str) -> Report:
        report = self._require_visible(principal, kind, report_id)
        if not principal.can_manage(report.employee_id):
            logger.warning("%s denied editing report %s", principal.employee_id, report_id)
            raise AuthorizationError("Only the author or a full-access employee can change this report")
        return report

    def get_report(self, *, principal: Principal, kind, report_id: str) -> Report:
        return self._require_visible(principal, parse_kind(kind), report_id)

    def list_reports(
        self,
        *,
        principal: Principal,
        kind,
        team_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        period=None,
    ) -> Sequence[Report]:
        kind = parse_kind(kind)
        period_value = period_for(kind).parse_filter(period)
        if principal.is_full_access:
            return self._reports.list(kind, team_id=team_id or None, employee_id=employee_id or None, period=period_value)
        return self._reports.list(
            kind,
            team_ids=principal.access_teams,
            owner_id=principal.employee_id,
            team_id=team_id or None,
            employee_id=employee_id or None,
            period=period_value,
        )

    def update_report(
        self,
        *,
        principal: Principal,
        kind,
        report_id: str,
        attachment: Optional[FilePayload] = None,
        **fields,
    ) -> SubmitResult:
        """Partial update; the merged result must still have a body or an attachment."""
        kind = parse_kind(kind)
        current = self._require_manageable(principal, kind, report_id)

        changes: dict = {}
        if "team_id" in fields and fields["team_id"] != current.team_id:
            changes["team_id"] = self._require_team(principal, fields["team_id"])
        if "body" in fields:
            changes["body"] = (fields["body"] or "").strip()
        for f in _TEXT_FIELDS:
            if f in fields:
                changes[f] = optional_text(fields[f])
        if "hours_worked" in fields:
            changes["hours_worked"] = optional_non_negative_int(fields["hours_worked"], "hoursWorked")
        if "attachment_url" in fields:
            changes["attachment_url"] = optional_text(fields["attachment_url"])
        changes.update(_monthly_fields(kind, fields))

        period_keys = ("week_start", "week_end") if kind == ReportKind.WEEKLY else ("month",)
        if any(k in fields for k in period_keys):
            merged_period = {k: fields.get(k, getattr(current, k)) for k in period_keys}
            changes.update(period_for(kind).parse(merged_period))

        merged = replace(current, **changes)
        warning = None
        if attachment is not None:
            uploaded, warning = self._upload(attachment)
            if uploaded:
                changes["attachment_url"] = uploaded
                merged = replace(merged, attachment_url=uploaded)
        ensure_complete(merged.body, merged.attachment_url)

        if not changes:
            return SubmitResult(report=current, warning=warning)
        return SubmitResult(report=self._reports.update(kind, report_id, changes), warning=warning)

    def delete_report(self, *, principal: Principal, kind, report_id: str) -> None:
        kind = parse_kind(kind)
        self._require_manageable(principal, kind, report_id)
        self._reports.delete(kind, report_id)
        logger.info("%s report %s deleted by %s", kind.value, report_id, principal.employee_id)
