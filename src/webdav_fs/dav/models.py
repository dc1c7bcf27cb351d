"""Data models for WebDAV responses and directory listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

# DAV XML element names (Clark notation)
DAV_RESPONSE = "{DAV:}response"
DAV_HREF = "{DAV:}href"
DAV_PROPSTAT = "{DAV:}propstat"
DAV_PROP = "{DAV:}prop"
DAV_STATUS = "{DAV:}status"
DAV_RESOURCETYPE = "{DAV:}resourcetype"
DAV_COLLECTION = "{DAV:}collection"
DAV_GETCONTENTLENGTH = "{DAV:}getcontentlength"
DAV_GETLASTMODIFIED = "{DAV:}getlastmodified"
DAV_GETCONTENTTYPE = "{DAV:}getcontenttype"

# Cache serialization keys
FIELD_FOLDER_PATH = "folder_path"
FIELD_ENTRIES = "entries"
FIELD_NAME = "name"
FIELD_IS_FOLDER = "is_folder"
FIELD_SIZE = "size"
FIELD_MODIFIED = "modified"
FIELD_CONTENT_TYPE = "content_type"


@dataclass
class DavResponse:
    """Uniform result of a WebDAV request."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def created(self) -> bool:
        return self.status_code == HTTPStatus.CREATED

    @property
    def overwritten(self) -> bool:
        return self.status_code == HTTPStatus.NO_CONTENT

    @classmethod
    def neutral(cls, status_code: int) -> DavResponse:
        """Empty result standing in for a logged protocol error."""
        return cls(status_code=status_code)


@dataclass
class DavEntry:
    """A single child of a folder as reported by a depth-1 PROPFIND."""

    name: str
    is_folder: bool
    size: int = 0
    modified: int = 0
    content_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            FIELD_NAME: self.name,
            FIELD_IS_FOLDER: self.is_folder,
            FIELD_SIZE: self.size,
            FIELD_MODIFIED: self.modified,
            FIELD_CONTENT_TYPE: self.content_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DavEntry:
        return cls(
            name=data[FIELD_NAME],
            is_folder=bool(data[FIELD_IS_FOLDER]),
            size=int(data.get(FIELD_SIZE, 0)),
            modified=int(data.get(FIELD_MODIFIED, 0)),
            content_type=data.get(FIELD_CONTENT_TYPE, ""),
        )


@dataclass
class DavListing:
    """The immediate children of a folder, as last observed on the store.

    Attributes:
        folder_path: Folder identifier the listing belongs to (ends with '/').
        entries: Children, without the folder's own self-reference.
        degraded: True when the listing request failed and the empty listing
            only stands in for it. Degraded listings are never cached.
    """

    folder_path: str
    entries: list[DavEntry] = field(default_factory=list)
    degraded: bool = False

    @property
    def files(self) -> list[DavEntry]:
        return [entry for entry in self.entries if not entry.is_folder]

    @property
    def folders(self) -> list[DavEntry]:
        return [entry for entry in self.entries if entry.is_folder]

    def find(self, name: str) -> DavEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            FIELD_FOLDER_PATH: self.folder_path,
            FIELD_ENTRIES: [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DavListing:
        return cls(
            folder_path=data[FIELD_FOLDER_PATH],
            entries=[DavEntry.from_dict(raw) for raw in data.get(FIELD_ENTRIES, [])],
        )
