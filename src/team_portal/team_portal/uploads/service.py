from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

from jose import JWTError, jwt

from ..common.ids import new_id
from ..core.constants import MB, UPLOAD_LIMITS, UPLOAD_URL_TTL_MINUTES
from ..core.enums import UploadKind
from ..core.exceptions import AuthorizationError, ValidationError
from .model import FilePayload, StoredObject, UploadDestination
from .storage import LocalObjectStorage, ObjectStorage, safe_object_name

logger = logging.getLogger(__name__)


def parse_kind(value) -> UploadKind:
    if isinstance(value, UploadKind):
        return value
    try:
        return UploadKind(str(value or "").lower())
    except ValueError:
        raise ValidationError("Invalid upload kind")


def limit_for(kind: UploadKind) -> int:
    return UPLOAD_LIMITS[kind.value]


def check_size(kind: UploadKind, size: int) -> None:
    if size is None or int(size) <= 0:
        raise ValidationError("File is empty")
    limit = limit_for(kind)
    if int(size) > limit:
        raise ValidationError(f"File is too large (max {limit // MB}MB)")


class UploadService:
    """Attachment uploads with server-side size limits per kind.

    Upload URLs carry a short-lived signed token bound to the object name,
    kind and declared size; ``receive`` only accepts bytes for such a URL and
    never replaces an existing object.
    """

    def __init__(
        self,
        storage: ObjectStorage,
        *,
        secret: str,
        algorithm: str = "HS256",
        ttl_minutes: int = UPLOAD_URL_TTL_MINUTES,
    ):
        self._storage = storage
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=int(ttl_minutes))

    def _sign(self, *, object_name: str, kind: UploadKind, size: int) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "typ": "upload",
            "obj": object_name,
            "kind": kind.value,
            "size": size,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def _verify(self, token: Optional[str], object_name: str) -> dict:
        if not token:
            raise AuthorizationError("Upload link is missing its token")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise AuthorizationError("Upload link is invalid or expired")
        if claims.get("typ") != "upload" or claims.get("obj") != object_name:
            logger.warning("upload token does not match %s", object_name)
            raise AuthorizationError("Upload link is invalid or expired")
        return claims

    def request_destination(self, *, kind, file_name: str, size: int, content_type: str = "") -> UploadDestination:
        kind = parse_kind(kind)
        if not file_name:
            raise ValidationError("File name is required")
        try:
            size = int(size)
        except (TypeError, ValueError):
            raise ValidationError("File size is required")
        check_size(kind, size)

        _, ext = os.path.splitext(os.path.basename(file_name))
        object_name = f"{new_id()}{ext.lower()}"
        return self._storage.request_destination(
            object_name=object_name,
            size=size,
            content_type=content_type or "application/octet-stream",
            query=urlencode({"token": self._sign(object_name=object_name, kind=kind, size=size)}),
        )

    def upload(self, kind, payload: FilePayload) -> str:
        """Reserve a destination and send ``payload``; returns the object path."""
        destination = self.request_destination(
            kind=kind,
            file_name=payload.file_name,
            size=payload.size,
            content_type=payload.content_type,
        )
        self._storage.put(destination, payload.data, payload.content_type)
        logger.info("stored %s (%d bytes)", destination.object_path, payload.size)
        return destination.object_path

    def receive(self, *, object_name: str, token: Optional[str], data: bytes) -> None:
        """Byte upload to a destination handed out by ``request_destination`` (local storage only)."""
        object_name = safe_object_name(object_name)
        claims = self._verify(token, object_name)
        check_size(parse_kind(claims.get("kind")), len(data))
        if len(data) > int(claims.get("size") or 0):
            raise ValidationError("File is larger than the size declared for this upload")
        if not isinstance(self._storage, LocalObjectStorage):
            raise ValidationError("Direct uploads are not supported by this storage")
        self._storage.write(object_name, data)
        logger.info("received %s (%d bytes)", object_name, len(data))

    def fetch(self, object_name: str) -> StoredObject:
        return self._storage.get(object_name)
