from datetime import date, datetime

import pytest

from src.team_portal.team_portal.core.enums import TaskPriority, TaskStatus
from src.team_portal.team_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.team_portal.team_portal.tasks.service import TaskService
from src.team_portal.team_portal.teams.model import Team
from tests.fakes import FakeEmployeesRepo, FakeTasksRepo, FakeTeamsRepo, admin, make_employee, principal


@pytest.fixture
def env():
    tasks, teams, employees = FakeTasksRepo(), FakeTeamsRepo(), FakeEmployeesRepo()
    teams.create(Team(team_id="T1", name="Design", description=None, color="#C41E3A"))
    teams.create(Team(team_id="T2", name="Video", description=None, color="#C41E3A"))
    employees.create(make_employee("bob"))
    return TaskService(tasks, teams, employees), tasks


def _create(service, team_id="T1", **kw):
    return service.create_task(principal=admin(), title="Poster", team_id=team_id, **kw)


def test_create_requires_full_access(env):
    service, _ = env
    with pytest.raises(AuthorizationError):
        service.create_task(principal=principal("bob", teams=["T1"]), title="x", team_id="T1")


def test_create_requires_title_and_team(env):
    service, _ = env
    with pytest.raises(ValidationError):
        service.create_task(principal=admin(), title="  ", team_id="T1")
    with pytest.raises(ValidationError):
        service.create_task(principal=admin(), title="Poster", team_id="")
    with pytest.raises(NotFoundError):
        service.create_task(principal=admin(), title="Poster", team_id="nope")


def test_create_defaults_and_case_insensitive_priority(env):
    service, _ = env
    task = _create(service)
    assert task.status == TaskStatus.TODO
    assert task.priority == TaskPriority.MEDIUM

    high = _create(service, priority="High", due_date="2026-04-01", assignee_id="bob")
    assert high.priority == TaskPriority.HIGH
    assert high.due_date == date(2026, 4, 1)
    assert high.to_dict()["priority"] == "High"
    assert _create(service, priority=" low ").to_dict()["priority"] == "Low"

    with pytest.raises(ValidationError):
        _create(service, priority="urgent")
    with pytest.raises(ValidationError):
        _create(service, assignee_id="ghost")


def test_arrows_move_one_column_and_stamp_completion(env):
    service, _ = env
    task = _create(service)
    member = principal("bob", teams=["T1"])
    done_at = datetime(2026, 3, 2, 16, 0)

    task = service.move_task(principal=member, task_id=task.task_id, direction="right")
    assert task.status == TaskStatus.IN_PROGRESS
    task = service.move_task(principal=member, task_id=task.task_id, direction="right", now=done_at)
    assert task.status == TaskStatus.DONE
    assert task.completed_at == done_at

    with pytest.raises(ValidationError):
        service.move_task(principal=member, task_id=task.task_id, direction="right")

    task = service.move_task(principal=member, task_id=task.task_id, direction="left")
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.completed_at is None


def test_direct_patch_cannot_skip_a_column(env):
    service, _ = env
    task = _create(service)
    with pytest.raises(ValidationError):
        service.update_task_status(principal=admin(), task_id=task.task_id, status="done")

    same = service.update_task_status(principal=admin(), task_id=task.task_id, status="todo")
    assert same == task


def test_team_scoping(env):
    service, _ = env
    t1 = _create(service, "T1")
    _create(service, "T2")
    outsider = principal("bob", teams=["T1"])

    assert [t.task_id for t in service.list_tasks(principal=outsider)] == [t1.task_id]
    assert len(service.list_tasks(principal=admin())) == 2
    with pytest.raises(AuthorizationError):
        service.list_tasks(principal=outsider, team_id="T2")

    columns = service.board(principal=outsider, team_id="T1")
    assert [t.task_id for t in columns["todo"]] == [t1.task_id]
    assert columns["in_progress"] == [] and columns["done"] == []


def test_update_fields(env):
    service, _ = env
    task = _create(service)
    updated = service.update_task(
        principal=admin(), task_id=task.task_id, title="Poster v2", description="", priority="low", due_date=None
    )
    assert updated.title == "Poster v2"
    assert updated.description is None
    assert updated.priority == TaskPriority.LOW


def test_comments_are_ordered_and_counted(env):
    service, _ = env
    task = _create(service)
    member = principal("bob", teams=["T1"])

    service.add_comment(principal=member, task_id=task.task_id, content="first", now=datetime(2026, 3, 2, 9))
    service.add_comment(principal=admin(), task_id=task.task_id, content="second", now=datetime(2026, 3, 2, 10))
    with pytest.raises(ValidationError):
        service.add_comment(principal=member, task_id=task.task_id, content="   ")

    comments = service.list_comments(principal=member, task_id=task.task_id)
    assert [c.content for c in comments] == ["first", "second"]
    assert service.comment_counts([task]) == {task.task_id: 2}
    with pytest.raises(AuthorizationError):
        service.list_comments(principal=principal("eve", teams=["T2"]), task_id=task.task_id)


def test_delete_cascades_comments(env):
    service, repo = env
    task = _create(service)
    service.add_comment(principal=admin(), task_id=task.task_id, content="note")

    with pytest.raises(AuthorizationError):
        service.delete_task(principal=principal("bob", teams=["T1"]), task_id=task.task_id)

    service.delete_task(principal=admin(), task_id=task.task_id)
    assert repo.get_by_id(task.task_id) is None
    assert repo.list_comments(task.task_id) == []
    with pytest.raises(NotFoundError):
        service.get_task(principal=admin(), task_id=task.task_id)
