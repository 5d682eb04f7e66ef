from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from ..core.exceptions import ValidationError

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def require_date(value, field_name: str) -> date:
    """Accept a date or a YYYY-MM-DD string; raise ValidationError otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def optional_date(value, field_name: str) -> date | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_date(value, field_name)


def require_month(value, field_name: str = "month") -> str:
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"{field_name} is required")
    if not _MONTH_RE.match(v):
        raise ValidationError(f"{field_name} must be YYYY-MM")
    return v


def week_bounds(day: date) -> tuple[date, date]:
    """Monday..Sunday week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def month_start(day: date) -> date:
    return day.replace(day=1)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
