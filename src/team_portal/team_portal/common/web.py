"""Small Flask helpers shared by the controllers."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import g, request

from ..core.exceptions import AuthenticationError, ValidationError
from ..employees.model import Principal
from .datetime_utils import optional_date


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def make_login_required(resolve: Callable[[str], Principal]):
    """Decorator factory: resolve the bearer token into ``g.principal``."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                raise AuthenticationError("Unauthorized")
            g.principal = resolve(token)
            return view(*args, **kwargs)

        return wrapper

    return login_required


def current_principal() -> Principal:
    return g.principal


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    return data


def pick(data: dict, mapping: dict[str, str]) -> dict:
    """Rename the camelCase keys present in ``data`` to service keyword names."""
    return {kw: data[key] for key, kw in mapping.items() if key in data}


def arg_date(name: str):
    return optional_date(request.args.get(name), name)


def arg_text(name: str) -> Optional[str]:
    v = request.args.get(name)
    return v.strip() if v and v.strip() else None
