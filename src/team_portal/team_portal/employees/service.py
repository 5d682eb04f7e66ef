from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.ids import new_id
from ..common.validators import optional_text, require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_EMPLOYEE_ROLE, DEFAULT_TOKEN_TTL_DAYS, MIN_PASSWORD_LENGTH
from ..core.enums import AccessLevel
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..teams.repository import TeamRepository
from .model import Employee, Principal
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


def _parse_access_level(value) -> AccessLevel:
    try:
        return AccessLevel(value)
    except ValueError:
        raise ValidationError("Invalid access level")


def _parse_access_teams(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError("accessTeams must be a list of team ids")
    return tuple(dict.fromkeys(str(v) for v in value if str(v).strip()))


@dataclass(frozen=True)
class LoginResult:
    token: str
    employee: Employee
    principal: Principal


class AuthService:
    """Use case: authenticate employees and resolve bearer tokens to principals."""

    def __init__(
        self,
        employees: EmployeeRepository,
        teams: TeamRepository,
        *,
        secret: str,
        algorithm: str = "HS256",
        ttl_days: int = DEFAULT_TOKEN_TTL_DAYS,
    ):
        self._employees = employees
        self._teams = teams
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(days=int(ttl_days))

    def principal_for(self, employee: Employee) -> Principal:
        if employee.access_level == AccessLevel.FULL:
            teams = frozenset(self._teams.team_ids_for_employee(employee.employee_id))
        else:
            teams = frozenset(employee.access_teams)
        return Principal(
            employee_id=employee.employee_id,
            name=employee.name,
            access_level=employee.access_level,
            access_teams=teams,
        )

    def issue_token(self, employee: Employee, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        claims = {"sub": employee.employee_id, "iat": now, "exp": now + self._ttl}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def authenticate(self, email: str, password: str) -> LoginResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        employee = self._employees.get_by_email(email.strip().lower())
        if not employee or not employee.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(employee.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        logger.info("employee %s logged in", employee.employee_id)
        return LoginResult(
            token=self.issue_token(employee),
            employee=employee,
            principal=self.principal_for(employee),
        )

    def resolve_token(self, token: str) -> Principal:
        """Re-read the employee on every request so deactivation applies at once."""

        if not token:
            raise AuthenticationError("Unauthorized")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise AuthenticationError("Invalid or expired token")

        employee_id = claims.get("sub")
        if not employee_id:
            raise AuthenticationError("Invalid token type")

        employee = self._employees.get_by_id(str(employee_id))
        if not employee or not employee.is_active:
            raise AuthenticationError("Account not found or disabled")
        return self.principal_for(employee)


class EmployeeService:
    """Use case: manage employees (full access) and self-service profile."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    @staticmethod
    def _require_full(principal: Principal) -> None:
        if not principal.is_full_access:
            logger.warning("employee management denied for %s", principal.employee_id)
            raise AuthorizationError("Insufficient permissions")

    def _require_employee(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get(self, employee_id: str) -> Employee:
        return self._require_employee(employee_id)

    def list_employees(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def create_employee(
        self,
        *,
        principal: Principal,
        email: str,
        name: str,
        password: str,
        role: Optional[str] = None,
        designation: Optional[str] = None,
        phone: Optional[str] = None,
        access_level=AccessLevel.TEAM_ONLY,
        access_teams=None,
    ) -> Employee:
        self._require_full(principal)

        email = require_email(email)
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_email(email):
            raise ConflictError("An employee with this email already exists")

        employee = self._employees.create(
            Employee(
                employee_id=new_id(),
                email=email,
                name=name,
                password_hash=generate_password_hash(password),
                role=optional_text(role) or DEFAULT_EMPLOYEE_ROLE,
                access_level=_parse_access_level(access_level or AccessLevel.TEAM_ONLY),
                access_teams=_parse_access_teams(access_teams),
                designation=optional_text(designation),
                phone=optional_text(phone),
            )
        )
        logger.info("employee %s created by %s", employee.employee_id, principal.employee_id)
        return employee

    def update_employee(self, *, principal: Principal, employee_id: str, **fields) -> Employee:
        self._require_full(principal)
        current = self._require_employee(employee_id)

        changes: dict = {}
        if fields.get("email") is not None:
            email = require_email(fields["email"])
            other = self._employees.get_by_email(email)
            if other and other.employee_id != employee_id:
                raise ConflictError("An employee with this email already exists")
            changes["email"] = email
        if fields.get("name") is not None:
            changes["name"] = require_non_empty(fields["name"], "Name")
        if fields.get("role") is not None:
            changes["role"] = require_non_empty(fields["role"], "Role")
        for key in ("designation", "phone", "avatar_url"):
            if key in fields:
                changes[key] = optional_text(fields[key])
        if fields.get("access_level") is not None:
            changes["access_level"] = _parse_access_level(fields["access_level"])
        if fields.get("access_teams") is not None:
            changes["access_teams"] = _parse_access_teams(fields["access_teams"])
        if fields.get("is_active") is not None:
            if current.employee_id == principal.employee_id and not fields["is_active"]:
                raise ValidationError("You cannot deactivate your own account")
            changes["is_active"] = bool(fields["is_active"])
        if fields.get("password"):
            require_min_length(fields["password"], "Password", MIN_PASSWORD_LENGTH)
            changes["password_hash"] = generate_password_hash(fields["password"])

        updated = self._employees.update(employee_id, changes)
        if not updated:
            raise NotFoundError("Employee not found")
        return updated

    def set_active(self, *, principal: Principal, employee_id: str, is_active: bool) -> Employee:
        return self.update_employee(principal=principal, employee_id=employee_id, is_active=is_active)

    def update_profile(self, *, principal: Principal, **fields) -> Employee:
        """Self-service: role and access level are not editable here."""

        self._require_employee(principal.employee_id)
        changes: dict = {}
        if fields.get("name") is not None:
            changes["name"] = require_non_empty(fields["name"], "Name")
        for key in ("designation", "phone", "avatar_url"):
            if key in fields:
                changes[key] = optional_text(fields[key])
        if fields.get("password"):
            require_min_length(fields["password"], "Password", MIN_PASSWORD_LENGTH)
            changes["password_hash"] = generate_password_hash(fields["password"])

        updated = self._employees.update(principal.employee_id, changes)
        if not updated:
            raise NotFoundError("Employee not found")
        return updated
