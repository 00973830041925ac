"""Find-or-create resolution of Drive folders and shared drives."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from ...errors import DriveError
from ..google_api import GoogleApiRequester
from ..google_auth import DRIVE_SCOPE, TokenIssuer
from .models import (
    DRIVE_API_BASE,
    DRIVE_DRIVES_ENDPOINT,
    DRIVE_FILES_ENDPOINT,
    DRIVE_FOLDER_MIME_TYPE,
    DriveFolder,
    DriveItem,
)
from .naming import escape_query_value, split_folder_path

logger = logging.getLogger(__name__)


class DriveResourceResolver:
    """Resolve Drive folders and shared drives by name, creating them when absent.

    Resolution is search-then-create. Two concurrent callers asking for the
    same missing folder can both create it; shared drives are protected by
    the ``requestId`` idempotency key that the Drive API honours.
    """

    def __init__(
        self,
        requester: GoogleApiRequester,
        *,
        api_base: str = DRIVE_API_BASE,
        request_id_prefix: str = "sppd",
    ) -> None:
        self._requester = requester
        self._api_base = api_base.rstrip("/")
        self._request_id_prefix = request_id_prefix

    @classmethod
    def from_issuer(
        cls,
        token_issuer: TokenIssuer,
        *,
        scopes: Iterable[str] = (DRIVE_SCOPE,),
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "DriveResourceResolver":
        requester = GoogleApiRequester(token_issuer, scopes, timeout=timeout, transport=transport)
        return cls(requester)

    async def _drive_request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return await self._requester.request(
            method,
            f"{self._api_base}{path}",
            params=params,
            json_data=json_data,
            error_cls=DriveError,
        )

    # Folders -----------------------------------------------------------
    async def find_folder(self, name: str, parent_id: str) -> Optional[DriveFolder]:
        query = (
            f"name = '{escape_query_value(name)}' "
            f"and '{escape_query_value(parent_id)}' in parents "
            f"and mimeType = '{DRIVE_FOLDER_MIME_TYPE}' and trashed = false"
        )
        params = {
            "q": query,
            "fields": "files(id,name,parents)",
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        data = await self._drive_request("GET", DRIVE_FILES_ENDPOINT, params=params)

        files = data.get("files")
        if isinstance(files, Sequence):
            for entry in files:
                if isinstance(entry, dict) and entry.get("id"):
                    return DriveFolder.from_api(entry, parent_id=parent_id)
        return None

    async def create_folder(self, name: str, parent_id: str) -> DriveFolder:
        payload = {
            "name": name,
            "mimeType": DRIVE_FOLDER_MIME_TYPE,
            "parents": [parent_id],
        }
        data = await self._drive_request(
            "POST",
            DRIVE_FILES_ENDPOINT,
            params={"supportsAllDrives": "true", "fields": "id,name,parents,webViewLink"},
            json_data=payload,
        )
        if not data.get("id"):
            logger.error("Google Drive folder creation response missing id: %s", data)
            raise DriveError(None, str(data), "Google Drive folder creation response missing id")

        logger.info("Created Drive folder %r under %s", name, parent_id)
        return DriveFolder.from_api(data, parent_id=parent_id)

    async def get_or_create_folder(self, name: str, parent_id: str = "root") -> str:
        if not name or not name.strip():
            raise ValueError("Folder name must be a non-empty string")

        folder = await self.find_folder(name, parent_id)
        if folder is None:
            folder = await self.create_folder(name, parent_id)
        return folder.id

    async def resolve_folder_path(self, path: str, root_id: str = "root") -> str:
        """Resolve ``a/b/c`` below ``root_id`` one segment at a time."""

        current_parent = root_id
        for segment in split_folder_path(path):
            current_parent = await self.get_or_create_folder(segment, current_parent)
        return current_parent

    async def list_children(self, parent_id: str = "root", *, page_size: int = 100) -> List[DriveItem]:
        params = {
            "q": f"'{escape_query_value(parent_id)}' in parents and trashed = false",
            "fields": "files(id,name,mimeType,webViewLink)",
            "orderBy": "folder,name_natural",
            "pageSize": page_size,
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        data = await self._drive_request("GET", DRIVE_FILES_ENDPOINT, params=params)

        files = data.get("files")
        if not isinstance(files, Sequence):
            return []
        return [DriveItem.from_api(entry) for entry in files if isinstance(entry, dict) and entry.get("id")]

    # Shared drives -----------------------------------------------------
    async def find_shared_drive(self, name: str) -> Optional[str]:
        params = {
            "q": f"name = '{escape_query_value(name)}'",
            "fields": "drives(id,name)",
            "pageSize": 10,
        }
        data = await self._drive_request("GET", DRIVE_DRIVES_ENDPOINT, params=params)

        drives = data.get("drives")
        if isinstance(drives, Sequence):
            for entry in drives:
                if isinstance(entry, dict) and entry.get("id") and entry.get("name", name) == name:
                    return str(entry["id"])
        return None

    def new_request_id(self) -> str:
        return f"{self._request_id_prefix}-{uuid.uuid4().hex}"

    async def get_or_create_shared_drive(self, name: str, request_id: Optional[str] = None) -> str:
        if not name or not name.strip():
            raise ValueError("Shared drive name must be a non-empty string")

        existing = await self.find_shared_drive(name)
        if existing is not None:
            return existing

        data = await self._drive_request(
            "POST",
            DRIVE_DRIVES_ENDPOINT,
            params={"requestId": request_id or self.new_request_id()},
            json_data={"name": name},
        )
        if not data.get("id"):
            logger.error("Google shared drive creation response missing id: %s", data)
            raise DriveError(None, str(data), "Google shared drive creation response missing id")

        logger.info("Created shared drive %r", name)
        return str(data["id"])
