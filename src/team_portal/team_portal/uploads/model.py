from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FilePayload:
    file_name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadDestination:
    upload_url: str
    object_path: str

    def to_dict(self) -> dict:
        return {"uploadURL": self.upload_url, "objectPath": self.object_path}


@dataclass(frozen=True)
class StoredObject:
    data: bytes
    content_type: str
