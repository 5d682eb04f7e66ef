import pytest

from src.team_portal.team_portal.core.enums import AccessLevel
from src.team_portal.team_portal.core.exceptions import AuthorizationError, ConflictError, ValidationError
from src.team_portal.team_portal.employees.service import EmployeeService
from tests.fakes import FakeEmployeesRepo, admin, principal


@pytest.fixture
def service():
    return EmployeeService(FakeEmployeesRepo())


def _create(service, email="new@metaedge.test", **kw):
    fields = dict(name="New Hire", password="secret1")
    fields.update(kw)
    return service.create_employee(principal=admin(), email=email, **fields)


def test_create_defaults(service):
    emp = _create(service, email="New@MetaEdge.test")
    assert emp.email == "new@metaedge.test"
    assert emp.role == "employee"
    assert emp.access_level == AccessLevel.TEAM_ONLY
    assert emp.access_teams == ()
    assert emp.password_hash != "secret1"


def test_create_validation(service):
    with pytest.raises(AuthorizationError):
        service.create_employee(principal=principal("bob"), email="a@b.co", name="A", password="secret1")
    with pytest.raises(ValidationError):
        _create(service, password="short")
    with pytest.raises(ValidationError):
        _create(service, email="not-an-email")
    with pytest.raises(ValidationError):
        _create(service, access_level="superuser")
    _create(service)
    with pytest.raises(ConflictError):
        _create(service)


def test_update_access_and_deactivate(service):
    emp = _create(service)
    updated = service.update_employee(
        principal=admin(),
        employee_id=emp.employee_id,
        access_level="multi_team",
        access_teams=["T1", "T2", "T1"],
    )
    assert updated.access_level == AccessLevel.MULTI_TEAM
    assert updated.access_teams == ("T1", "T2")

    off = service.set_active(principal=admin(), employee_id=emp.employee_id, is_active=False)
    assert off.is_active is False


def test_cannot_deactivate_self(service):
    me = _create(service, email="boss@metaedge.test", access_level="full")
    with pytest.raises(ValidationError):
        service.set_active(principal=admin(me.employee_id), employee_id=me.employee_id, is_active=False)


def test_profile_self_service(service):
    emp = _create(service)
    me = principal(emp.employee_id)

    updated = service.update_profile(principal=me, name="Renamed", phone=" 0123 ", designation="")
    assert updated.name == "Renamed"
    assert updated.phone == "0123"
    assert updated.designation is None
    with pytest.raises(ValidationError):
        service.update_profile(principal=me, password="123")
