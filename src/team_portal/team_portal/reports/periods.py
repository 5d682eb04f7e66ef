from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..common.datetime_utils import require_date, require_month
from ..core.enums import ReportKind
from ..core.exceptions import ValidationError


class ReportPeriod(ABC):
    """Strategy Pattern: how a report kind describes the period it covers."""

    kind: ReportKind

    @abstractmethod
    def parse(self, fields: dict) -> dict:
        """Validate the period fields; returns them normalized."""
        raise NotImplementedError

    @abstractmethod
    def parse_filter(self, value: Any) -> Optional[Any]:
        raise NotImplementedError


class WeeklyPeriod(ReportPeriod):
    kind = ReportKind.WEEKLY

    def parse(self, fields: dict) -> dict:
        if not fields.get("week_start") or not fields.get("week_end"):
            raise ValidationError("Week start and week end are required")
        start = require_date(fields["week_start"], "weekStart")
        end = require_date(fields["week_end"], "weekEnd")
        if end < start:
            raise ValidationError("weekEnd must not be before weekStart")
        return {"week_start": start, "week_end": end}

    def parse_filter(self, value: Any):
        return require_date(value, "weekStart") if value else None


class MonthlyPeriod(ReportPeriod):
    kind = ReportKind.MONTHLY

    def parse(self, fields: dict) -> dict:
        if not fields.get("month"):
            raise ValidationError("Month is required")
        return {"month": require_month(fields["month"])}

    def parse_filter(self, value: Any):
        return require_month(value) if value else None


_PERIODS = {p.kind: p for p in (WeeklyPeriod(), MonthlyPeriod())}


def parse_kind(value) -> ReportKind:
    if isinstance(value, ReportKind):
        return value
    try:
        return ReportKind(str(value or "").lower())
    except ValueError:
        raise ValidationError("Report kind must be weekly or monthly")


def period_for(kind) -> ReportPeriod:
    return _PERIODS[parse_kind(kind)]
