from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from src.team_portal.team_portal.core.constants import MB
from src.team_portal.team_portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from src.team_portal.team_portal.uploads.model import FilePayload
from src.team_portal.team_portal.uploads.service import UploadService
from src.team_portal.team_portal.uploads.storage import LocalObjectStorage, RemoteObjectStorage

SECRET = "upload-secret"


@pytest.fixture
def local(tmp_path):
    return UploadService(LocalObjectStorage(str(tmp_path / "uploads")), secret=SECRET)


@pytest.mark.parametrize(
    "kind,size,ok",
    [
        ("cv", 10 * MB, True),
        ("cv", 10 * MB + 1, False),
        ("report", 10 * MB + 1, False),
        ("portfolio", 25 * MB, True),
        ("portfolio", 25 * MB + 1, False),
        ("avatar", 10 * MB + 1, False),
    ],
)
def test_size_limits_per_kind(local, kind, size, ok):
    if ok:
        local.request_destination(kind=kind, file_name="a.pdf", size=size)
    else:
        with pytest.raises(ValidationError):
            local.request_destination(kind=kind, file_name="a.pdf", size=size)


def test_destination_uses_server_generated_name(local):
    dest = local.request_destination(kind="report", file_name="../../etc/My Report.PDF", size=10, content_type="application/pdf")
    name = dest.object_path.rsplit("/", 1)[-1]

    assert dest.object_path.startswith("/objects/uploads/")
    assert name.endswith(".pdf")
    assert "Report" not in name
    assert dest.upload_url.startswith(f"/api/uploads/file/{name}?token=")


def test_request_validation(local):
    with pytest.raises(ValidationError):
        local.request_destination(kind="selfie", file_name="a.png", size=1)
    with pytest.raises(ValidationError):
        local.request_destination(kind="cv", file_name="", size=1)
    with pytest.raises(ValidationError):
        local.request_destination(kind="cv", file_name="a.pdf", size=0)


def test_local_upload_and_fetch(local):
    path = local.upload("report", FilePayload(file_name="notes.txt", content_type="text/plain", data=b"hello"))
    stored = local.fetch(path.rsplit("/", 1)[-1])

    assert stored.data == b"hello"
    assert stored.content_type == "text/plain"
    with pytest.raises(NotFoundError):
        local.fetch("missing.txt")


def _name_and_token(dest):
    url = urlsplit(dest.upload_url)
    return url.path.rsplit("/", 1)[-1], parse_qs(url.query)["token"][0]


def test_byte_upload_needs_the_signed_link(local):
    name, token = _name_and_token(local.request_destination(kind="portfolio", file_name="a.bin", size=3))

    with pytest.raises(AuthorizationError):
        local.receive(object_name=name, token=None, data=b"xxx")
    with pytest.raises(AuthorizationError):
        local.receive(object_name=name, token="not-a-token", data=b"xxx")
    forged = UploadService(LocalObjectStorage("unused"), secret="other-secret")
    _, foreign = _name_and_token(forged.request_destination(kind="portfolio", file_name="a.bin", size=3))
    with pytest.raises(AuthorizationError):
        local.receive(object_name=name, token=foreign, data=b"xxx")

    local.receive(object_name=name, token=token, data=b"xxx")
    assert local.fetch(name).data == b"xxx"


def test_token_is_bound_to_its_object_and_size(local):
    first, token = _name_and_token(local.request_destination(kind="cv", file_name="a.pdf", size=4))
    second, _ = _name_and_token(local.request_destination(kind="cv", file_name="b.pdf", size=4))

    with pytest.raises(AuthorizationError):
        local.receive(object_name=second, token=token, data=b"%PDF")
    with pytest.raises(ValidationError):
        local.receive(object_name=first, token=token, data=b"%PDF-longer")
    with pytest.raises(ValidationError):
        local.receive(object_name="../escape.bin", token=token, data=b"x")


def test_existing_object_is_never_overwritten(local):
    path = local.upload("report", FilePayload(file_name="week.pdf", content_type="application/pdf", data=b"ORIGINAL"))
    name = path.rsplit("/", 1)[-1]

    with pytest.raises(AuthorizationError):
        local.receive(object_name=name, token=None, data=b"TAMPERED")

    dest = local.request_destination(kind="report", file_name="x.pdf", size=8)
    fresh, token = _name_and_token(dest)
    local.receive(object_name=fresh, token=token, data=b"FIRST")
    with pytest.raises(ConflictError):
        local.receive(object_name=fresh, token=token, data=b"TAMPERED")

    assert local.fetch(name).data == b"ORIGINAL"
    assert local.fetch(fresh).data == b"FIRST"


def _remote(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return UploadService(RemoteObjectStorage("https://storage.test/", client=client), secret=SECRET)


def test_remote_two_step_upload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        if request.url.path == "/api/uploads/request-url":
            return httpx.Response(200, json={"uploadURL": "https://bucket.test/put/1", "objectPath": "/objects/uploads/1.pdf"})
        assert request.content == b"%PDF"
        return httpx.Response(200)

    path = _remote(handler).upload("cv", FilePayload(file_name="cv.pdf", content_type="application/pdf", data=b"%PDF"))

    assert path == "/objects/uploads/1.pdf"
    assert seen == [
        ("POST", "https://storage.test/api/uploads/request-url"),
        ("PUT", "https://bucket.test/put/1"),
    ]


@pytest.mark.parametrize("status", [500, 403])
def test_remote_non_2xx_is_upstream_error(status):
    service = _remote(lambda request: httpx.Response(status))
    with pytest.raises(UpstreamError):
        service.upload("cv", FilePayload(file_name="cv.pdf", content_type="application/pdf", data=b"x"))


def test_remote_transport_error_is_upstream_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamError):
        _remote(handler).request_destination(kind="cv", file_name="cv.pdf", size=1)
