import io

import pytest

from src.team_portal.team_portal.core.enums import AccessLevel
from src.team_portal.team_portal.main import create_app
from src.team_portal.team_portal.uploads.storage import LocalObjectStorage
from tests.fakes import Repos, make_employee

API = "/api/team-portal"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    repos = Repos(storage=LocalObjectStorage(str(tmp_path / "uploads")))
    repos.employees.create(make_employee("boss", email="boss@metaedge.test", password="boss-pass", level=AccessLevel.FULL))
    repos.employees.create(make_employee("bob", email="bob@metaedge.test", password="bob-pass"))
    app = create_app(repos.container())
    return app.test_client()


def _login(client, email, password):
    res = client.post(f"{API}/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.get_json()
    return {"Authorization": f"Bearer {res.get_json()['token']}"}


@pytest.fixture
def boss(client):
    return _login(client, "boss@metaedge.test", "boss-pass")


@pytest.fixture
def bob(client):
    return _login(client, "bob@metaedge.test", "bob-pass")


@pytest.fixture
def team_id(client, boss):
    res = client.post(f"{API}/teams", json={"name": "Design"}, headers=boss)
    assert res.status_code == 201
    tid = res.get_json()["id"]
    assert client.post(f"{API}/teams/{tid}/members", json={"employeeId": "bob"}, headers=boss).status_code == 201
    assert client.patch(f"{API}/employees/bob", json={"accessTeams": [tid]}, headers=boss).status_code == 200
    return tid


def test_requests_need_a_valid_bearer_token(client):
    assert client.get(f"{API}/me").status_code == 401
    res = client.get(f"{API}/me", headers={"Authorization": "Bearer junk"})
    assert res.status_code == 401
    assert "error" in res.get_json()
    assert client.post(f"{API}/login", json={"email": "bob@metaedge.test", "password": "nope"}).status_code == 401


def test_me_and_profile(client, bob):
    me = client.get(f"{API}/me", headers=bob).get_json()
    assert me["email"] == "bob@metaedge.test"
    assert "passwordHash" not in me and "password_hash" not in me

    res = client.patch(f"{API}/me", json={"designation": "Designer"}, headers=bob)
    assert res.get_json()["designation"] == "Designer"


def test_permission_errors_are_403(client, bob):
    res = client.post(f"{API}/teams", json={"name": "Nope"}, headers=bob)
    assert res.status_code == 403
    assert client.get(f"{API}/clock/all", headers=bob).status_code == 403


def test_clock_flow(client, bob):
    assert client.get(f"{API}/clock/status", headers=bob).get_json()["clockedIn"] is False
    assert client.post(f"{API}/clock/in", json={"notes": "office"}, headers=bob).status_code == 201
    assert client.post(f"{API}/clock/in", json={}, headers=bob).status_code == 409

    status = client.get(f"{API}/clock/status", headers=bob).get_json()
    assert status["clockedIn"] is True
    assert status["clockEntry"]["notes"] == "office"

    out = client.post(f"{API}/clock/out", headers=bob)
    assert out.status_code == 200
    assert client.post(f"{API}/clock/out", headers=bob).status_code == 404

    entries = client.get(f"{API}/clock/entries", headers=bob).get_json()
    assert len(entries) == 1
    assert entries[0]["duration"] == "00:00:00"

    week = client.get(f"{API}/clock/week", headers=bob).get_json()
    assert len(week["days"]) == 7

    csv_res = client.get(f"{API}/clock/entries.csv", headers=bob)
    assert csv_res.mimetype == "text/csv"
    assert csv_res.get_data(as_text=True).splitlines()[0] == "date,clock_in,clock_out,duration,notes"


def test_task_board_flow(client, boss, bob, team_id):
    res = client.post(f"{API}/tasks", json={"title": "Poster", "teamId": team_id, "priority": "High"}, headers=boss)
    assert res.status_code == 201
    task = res.get_json()
    assert task["priority"] == "High"

    assert client.post(f"{API}/tasks", json={"title": "x", "teamId": team_id}, headers=bob).status_code == 403
    assert client.patch(f"{API}/tasks/{task['id']}", json={"status": "done"}, headers=bob).status_code == 400

    moved = client.post(f"{API}/tasks/{task['id']}/move", json={"direction": "right"}, headers=bob).get_json()
    assert moved["status"] == "in_progress"

    assert client.post(f"{API}/tasks/{task['id']}/comments", json={"content": "looks good"}, headers=bob).status_code == 201
    listed = client.get(f"{API}/tasks?teamId={team_id}", headers=bob).get_json()
    assert listed[0]["commentCount"] == 1

    board = client.get(f"{API}/tasks/board?teamId={team_id}", headers=bob).get_json()
    assert [t["id"] for t in board["in_progress"]] == [task["id"]]

    # Team still owns a task.
    assert client.delete(f"{API}/teams/{team_id}", headers=boss).status_code == 409
    assert client.delete(f"{API}/tasks/{task['id']}", headers=boss).status_code == 204
    assert client.delete(f"{API}/teams/{team_id}", headers=boss).status_code == 204


def test_leave_flow(client, boss, bob):
    res = client.post(
        f"{API}/leaves",
        json={"type": "Sick Leave", "startDate": "2026-03-02", "endDate": "2026-03-03", "reason": "flu"},
        headers=bob,
    )
    assert res.status_code == 201
    leave_id = res.get_json()["id"]

    assert client.patch(f"{API}/leaves/{leave_id}", json={"status": "approved"}, headers=bob).status_code == 403
    approved = client.patch(f"{API}/leaves/{leave_id}", json={"status": "approved"}, headers=boss)
    assert approved.get_json()["status"] == "approved"
    assert client.patch(f"{API}/leaves/{leave_id}", json={"status": "rejected"}, headers=boss).status_code == 409

    assert len(client.get(f"{API}/leaves", headers=bob).get_json()) == 1
    assert client.post(f"{API}/leaves", json={"type": "Sick"}, headers=bob).status_code == 400


def test_notes_flow(client, bob, boss):
    note = client.post(f"{API}/notes", json={"title": "Ideas", "content": "moodboard"}, headers=bob).get_json()
    assert note["color"] == "#fff3cd"

    pinned = client.post(f"{API}/notes/{note['id']}/pin", headers=bob).get_json()
    assert pinned["isPinned"] is True
    assert client.get(f"{API}/notes?search=MOOD", headers=bob).get_json()[0]["id"] == note["id"]
    assert client.patch(f"{API}/notes/{note['id']}", json={"title": "x"}, headers=boss).status_code == 404
    assert client.delete(f"{API}/notes/{note['id']}", headers=bob).status_code == 204


def test_weekly_report_with_file_and_without_note(client, bob, team_id):
    period = {"teamId": team_id, "weekStart": "2026-03-02", "weekEnd": "2026-03-08"}

    res = client.post(f"{API}/weekly-reports", json={**period, "accomplishments": ""}, headers=bob)
    assert res.status_code == 400

    res = client.post(
        f"{API}/weekly-reports",
        data={**period, "file": (io.BytesIO(b"%PDF-1.7"), "week.pdf")},
        content_type="multipart/form-data",
        headers=bob,
    )
    assert res.status_code == 201, res.get_json()
    report = res.get_json()
    assert report["attachmentUrl"].startswith("/objects/uploads/")

    served = client.get(report["attachmentUrl"])
    assert served.status_code == 200
    assert served.data == b"%PDF-1.7"

    listed = client.get(f"{API}/weekly-reports?weekStart=2026-03-02", headers=bob).get_json()
    assert [r["id"] for r in listed] == [report["id"]]


def test_monthly_report_update_and_delete(client, bob, team_id):
    res = client.post(
        f"{API}/monthly-reports", json={"teamId": team_id, "month": "2026-03", "summary": "Busy"}, headers=bob
    )
    assert res.status_code == 201
    rid = res.get_json()["id"]

    updated = client.put(f"{API}/monthly-reports/{rid}", json={"summary": "Very busy", "hoursWorked": 160}, headers=bob)
    assert updated.get_json()["summary"] == "Very busy"
    assert updated.get_json()["hoursWorked"] == 160
    assert client.put(f"{API}/monthly-reports/{rid}", json={"summary": ""}, headers=bob).status_code == 400
    assert client.delete(f"{API}/monthly-reports/{rid}", headers=bob).status_code == 204
    assert client.get(f"{API}/monthly-reports/{rid}", headers=bob).status_code == 404


def test_upload_endpoints(client, bob):
    res = client.post(
        "/api/uploads/request-url",
        json={"kind": "cv", "name": "cv.pdf", "size": 4, "contentType": "application/pdf"},
        headers=bob,
    )
    assert res.status_code == 200
    dest = res.get_json()

    put = client.put(dest["uploadURL"], data=b"%PDF", headers=bob)
    assert put.status_code == 200
    assert client.get(dest["objectPath"]).data == b"%PDF"

    too_big = client.post(
        "/api/uploads/request-url", json={"kind": "cv", "name": "cv.pdf", "size": 11 * 1024 * 1024}, headers=bob
    )
    assert too_big.status_code == 400


def test_stored_attachment_cannot_be_replaced_by_a_teammate(client, boss, bob, team_id):
    res = client.post(
        f"{API}/weekly-reports",
        data={"teamId": team_id, "weekStart": "2026-03-02", "weekEnd": "2026-03-08", "file": (io.BytesIO(b"BOBS-REPORT"), "w.pdf")},
        content_type="multipart/form-data",
        headers=bob,
    )
    assert res.status_code == 201, res.get_json()
    url = res.get_json()["attachmentUrl"]
    name = url.rsplit("/", 1)[-1]

    assert client.put(f"/api/uploads/file/{name}?kind=report", data=b"TAMPERED", headers=boss).status_code == 403

    other = client.post(
        "/api/uploads/request-url", json={"kind": "report", "name": "x.pdf", "size": 8}, headers=boss
    ).get_json()
    token = other["uploadURL"].split("?", 1)[1]
    assert client.put(f"/api/uploads/file/{name}?{token}", data=b"TAMPERED", headers=boss).status_code == 403

    assert client.put(other["uploadURL"], data=b"FIRST", headers=boss).status_code == 200
    assert client.put(other["uploadURL"], data=b"TAMPERED", headers=boss).status_code == 409

    assert client.get(url).data == b"BOBS-REPORT"
    assert client.get(other["objectPath"]).data == b"FIRST"


def test_dashboard_and_performance(client, boss, bob):
    client.post(f"{API}/clock/in", json={}, headers=bob)

    mine = client.get(f"{API}/dashboard", headers=bob).get_json()
    assert mine["clockedIn"] is True
    assert "totalEmployees" not in mine

    assert client.get(f"{API}/admin/performance", headers=bob).status_code == 403
    rows = client.get(f"{API}/admin/performance", headers=boss).get_json()
    assert {r["employeeId"] for r in rows} == {"boss", "bob"}
    assert client.get(f"{API}/performance", headers=bob).get_json()["tasksTotal"] == 0
