from datetime import datetime, timedelta, timezone

import pytest

from src.team_portal.team_portal.core.enums import AccessLevel
from src.team_portal.team_portal.core.exceptions import AuthenticationError, ValidationError
from src.team_portal.team_portal.employees.service import AuthService
from src.team_portal.team_portal.teams.model import TeamMembership
from tests.fakes import FakeEmployeesRepo, FakeTeamsRepo, make_employee


@pytest.fixture
def env():
    employees, teams = FakeEmployeesRepo(), FakeTeamsRepo()
    employees.create(make_employee("bob", password="hunter22", teams=["T1", "T2"], level=AccessLevel.MULTI_TEAM))
    employees.create(make_employee("boss", password="hunter22", teams=["ignored"], level=AccessLevel.FULL))
    teams.add_member(TeamMembership(membership_id="m1", team_id="T3", employee_id="boss", role="lead"))
    return AuthService(employees, teams, secret="s3cret", ttl_days=7), employees


def test_login_returns_token_resolving_to_principal(env):
    auth, _ = env
    result = auth.authenticate("  BOB@metaedge.test ", "hunter22")

    p = auth.resolve_token(result.token)
    assert p.employee_id == "bob"
    assert p.access_teams == frozenset({"T1", "T2"})
    assert not p.is_full_access
    assert "password_hash" not in str(result.employee.to_public())


def test_full_access_teams_come_from_memberships(env):
    auth, employees = env
    p = auth.principal_for(employees.get_by_id("boss"))
    assert p.is_full_access
    assert p.access_teams == frozenset({"T3"})
    assert p.can_access_team("anything")


def test_bad_credentials(env):
    auth, _ = env
    with pytest.raises(ValidationError):
        auth.authenticate("", "x")
    with pytest.raises(AuthenticationError):
        auth.authenticate("bob@metaedge.test", "wrong-password")
    with pytest.raises(AuthenticationError):
        auth.authenticate("nobody@metaedge.test", "hunter22")


def test_deactivation_applies_to_existing_tokens(env):
    auth, employees = env
    token = auth.authenticate("bob@metaedge.test", "hunter22").token

    employees.update("bob", {"is_active": False})
    with pytest.raises(AuthenticationError):
        auth.resolve_token(token)
    with pytest.raises(AuthenticationError):
        auth.authenticate("bob@metaedge.test", "hunter22")


def test_tampered_and_expired_tokens(env):
    auth, employees = env
    bob = employees.get_by_id("bob")

    with pytest.raises(AuthenticationError):
        auth.resolve_token("not-a-jwt")
    with pytest.raises(AuthenticationError):
        AuthService(employees, FakeTeamsRepo(), secret="other").resolve_token(auth.issue_token(bob))

    stale = auth.issue_token(bob, now=datetime.now(timezone.utc) - timedelta(days=8))
    with pytest.raises(AuthenticationError):
        auth.resolve_token(stale)
    with pytest.raises(AuthenticationError):
        auth.resolve_token("")
