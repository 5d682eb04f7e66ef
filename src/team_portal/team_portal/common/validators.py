from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value) -> str | None:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str, field_name: str = "email") -> str:
    v = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(v):
        raise ValidationError("Valid email is required")
    return v


def require_in(value, choices, field_name: str):
    if value not in choices:
        raise ValidationError(f"Invalid {field_name}")
    return value


def optional_non_negative_int(value, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if n < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return n


def require_bool(value, field_name: str) -> bool:
    # JSON true/false only; "false" or 0 are rejected rather than coerced.
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value
