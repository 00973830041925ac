from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"
DRIVE_FILES_ENDPOINT = "/files"
DRIVE_DRIVES_ENDPOINT = "/drives"
DRIVE_FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

__all__ = [
    "DRIVE_API_BASE",
    "DRIVE_UPLOAD_BASE",
    "DRIVE_FILES_ENDPOINT",
    "DRIVE_DRIVES_ENDPOINT",
    "DRIVE_FOLDER_MIME_TYPE",
    "DriveFolder",
    "DriveFile",
    "DriveItem",
]


def _first_parent(entry: Mapping[str, Any]) -> Optional[str]:
    parents = entry.get("parents")
    if isinstance(parents, list) and parents:
        return str(parents[0])
    return None


@dataclass(frozen=True)
class DriveFolder:
    id: str
    name: str
    parent_id: Optional[str]

    @classmethod
    def from_api(cls, entry: Mapping[str, Any], *, parent_id: Optional[str] = None) -> "DriveFolder":
        return cls(
            id=str(entry["id"]),
            name=str(entry.get("name") or ""),
            parent_id=_first_parent(entry) or parent_id,
        )


@dataclass(frozen=True)
class DriveFile:
    id: str
    name: str
    parent_id: Optional[str]
    mime_type: str
    web_view_link: Optional[str] = None
    web_content_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileId": self.id,
            "name": self.name,
            "parentId": self.parent_id,
            "mimeType": self.mime_type,
            "webViewLink": self.web_view_link,
            "webContentLink": self.web_content_link,
        }


@dataclass(frozen=True)
class DriveItem:
    """A file or folder entry returned by a Drive listing."""

    id: str
    name: str
    mime_type: str
    web_view_link: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == DRIVE_FOLDER_MIME_TYPE

    @classmethod
    def from_api(cls, entry: Mapping[str, Any]) -> "DriveItem":
        link = entry.get("webViewLink")
        return cls(
            id=str(entry["id"]),
            name=str(entry.get("name") or ""),
            mime_type=str(entry.get("mimeType") or ""),
            web_view_link=link if isinstance(link, str) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "webViewLink": self.web_view_link,
        }
