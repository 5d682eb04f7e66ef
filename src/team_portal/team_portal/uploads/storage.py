from __future__ import annotations

import logging
import mimetypes
import os
import re
from pathlib import Path
from typing import Optional, Protocol

import httpx

from ..core.exceptions import ConflictError, NotFoundError, UpstreamError, ValidationError
from .model import StoredObject, UploadDestination

logger = logging.getLogger(__name__)

OBJECT_PREFIX = "/objects/uploads/"
UPLOAD_ROUTE = "/api/uploads/file/"

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def safe_object_name(name: str) -> str:
    if not name or not _SAFE_NAME.match(name) or ".." in name:
        raise ValidationError("Invalid file name")
    return name


class ObjectStorage(Protocol):
    """Two-step upload: reserve a destination, then send the bytes to it."""

    def request_destination(self, *, object_name: str, size: int, content_type: str, query: str = "") -> UploadDestination:
        raise NotImplementedError

    def put(self, destination: UploadDestination, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def get(self, object_name: str) -> StoredObject:
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    """Stores objects as plain files under ``root``; served by the uploads controller."""

    def __init__(self, root: str):
        self._root = Path(root)

    def _path(self, object_name: str) -> Path:
        return self._root / safe_object_name(object_name)

    def request_destination(self, *, object_name: str, size: int, content_type: str, query: str = "") -> UploadDestination:
        safe_object_name(object_name)
        upload_url = f"{UPLOAD_ROUTE}{object_name}"
        if query:
            upload_url = f"{upload_url}?{query}"
        return UploadDestination(upload_url=upload_url, object_path=f"{OBJECT_PREFIX}{object_name}")

    def put(self, destination: UploadDestination, data: bytes, content_type: str) -> None:
        self.write(destination.object_path.rsplit("/", 1)[-1], data)

    def write(self, object_name: str, data: bytes) -> None:
        """Create ``object_name``; an existing object is never replaced."""
        path = self._path(object_name)
        try:
            os.makedirs(self._root, exist_ok=True)
            with open(path, "xb") as fh:
                fh.write(data)
        except FileExistsError as e:
            logger.warning("refused to overwrite %s", path)
            raise ConflictError("File already exists") from e
        except OSError as e:
            logger.warning("could not write %s: %s", path, e)
            raise UpstreamError("Failed to store file") from e

    def get(self, object_name: str) -> StoredObject:
        path = self._path(object_name)
        if not path.is_file():
            raise NotFoundError("File not found")
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return StoredObject(data=path.read_bytes(), content_type=content_type)


class RemoteObjectStorage(ObjectStorage):
    """Object-storage API reached over HTTP.

    ``POST {base}/api/uploads/request-url`` returns ``{uploadURL, objectPath}``;
    the bytes are then PUT to ``uploadURL``.
    """

    def __init__(self, base_url: str, *, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}{path}"

    def request_destination(self, *, object_name: str, size: int, content_type: str, query: str = "") -> UploadDestination:
        try:
            response = self._client.post(
                self._url("/api/uploads/request-url"),
                json={"name": object_name, "size": size, "contentType": content_type},
            )
            response.raise_for_status()
            body = response.json()
            return UploadDestination(upload_url=body["uploadURL"], object_path=body["objectPath"])
        except httpx.HTTPStatusError as e:
            logger.warning("storage refused upload url (%s)", e.response.status_code)
            raise UpstreamError("Storage service rejected the upload") from e
        except (httpx.RequestError, ValueError, KeyError) as e:
            logger.warning("storage unreachable: %s", e)
            raise UpstreamError("Storage service unavailable") from e

    def put(self, destination: UploadDestination, data: bytes, content_type: str) -> None:
        try:
            response = self._client.put(
                self._url(destination.upload_url),
                content=data,
                headers={"Content-Type": content_type},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("storage upload failed (%s)", e.response.status_code)
            raise UpstreamError("Storage service rejected the upload") from e
        except httpx.RequestError as e:
            logger.warning("storage unreachable: %s", e)
            raise UpstreamError("Storage service unavailable") from e

    def get(self, object_name: str) -> StoredObject:
        try:
            response = self._client.get(self._url(f"{OBJECT_PREFIX}{safe_object_name(object_name)}"))
        except httpx.RequestError as e:
            logger.warning("storage unreachable: %s", e)
            raise UpstreamError("Storage service unavailable") from e
        if response.status_code == 404:
            raise NotFoundError("File not found")
        if response.is_error:
            raise UpstreamError("Storage service error")
        return StoredObject(
            data=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
        )
