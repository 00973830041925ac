from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..config import Settings
from ..errors import SheetsError
from .google_drive import DriveFile, DriveResourceResolver, DriveUploader
from .google_drive.naming import build_photo_filename
from .google_sheets import SheetsValueClient

logger = logging.getLogger(__name__)

INCIDENT_SHEET_HEADER = (
    "ID",
    "Tanggal",
    "Waktu",
    "Lokasi",
    "Deskripsi",
    "Teknisi",
    "Status",
    "Prioritas",
    "Timestamp",
)
DEFAULT_PHOTO_MIME_TYPE = "image/jpeg"
SPREADSHEET_TITLE_PREFIX = "SPPD-LEMBUR"
_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,(?P<data>.*)$", re.DOTALL)


def decode_data_url(value: str, default_mime_type: str = DEFAULT_PHOTO_MIME_TYPE) -> Tuple[bytes, str]:
    """Decode a ``data:<mime>;base64,...`` URL (or bare base64) into bytes and a mime type."""

    mime_type = default_mime_type
    payload = value.strip()
    match = _DATA_URL_PATTERN.match(payload)
    if match:
        payload = match.group("data")
        if match.group("mime"):
            mime_type = match.group("mime")
    elif payload.startswith("data:"):
        raise ValueError("Only base64 data URLs are supported")

    payload = re.sub(r"\s+", "", payload)
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("File content is not valid base64") from exc
    if not content:
        raise ValueError("File content is empty")
    return content, mime_type


@dataclass(frozen=True)
class IncidentRecord:
    id: str
    tanggal: str
    waktu: str
    lokasi: str
    deskripsi: str
    teknisi: str
    status: str
    prioritas: str

    def to_row(self, timestamp: str) -> List[str]:
        return [
            self.id,
            self.tanggal,
            self.waktu,
            self.lokasi,
            self.deskripsi,
            self.teknisi,
            self.status,
            self.prioritas,
            timestamp,
        ]


@dataclass(frozen=True)
class SyncResult:
    spreadsheet_id: str
    sheet_title: str
    action: str
    row_index: int
    updated_range: Optional[str]
    updated_rows: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spreadsheetId": self.spreadsheet_id,
            "sheetName": self.sheet_title,
            "action": self.action,
            "rowIndex": self.row_index,
            "updatedRange": self.updated_range,
            "updatedRows": self.updated_rows,
        }


@dataclass(frozen=True)
class PhotoUpload:
    file: DriveFile
    folder_id: str
    folder_path: str


class IncidentRecordService:
    """Store incident photos in Drive and keep one spreadsheet row per incident."""

    def __init__(
        self,
        settings: Settings,
        resolver: DriveResourceResolver,
        uploader: DriveUploader,
        sheets: SheetsValueClient,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._settings = settings
        self._resolver = resolver
        self._uploader = uploader
        self._sheets = sheets
        self._clock = clock
        self._created_spreadsheet_id: Optional[str] = None

    async def resolve_spreadsheet_id(self, spreadsheet_id: Optional[str] = None) -> str:
        """Return a usable spreadsheet id, creating the incident spreadsheet when needed.

        A spreadsheet is created when no id is configured or the configured one
        answers 404. The created id is reused for the lifetime of the service.
        """

        target = spreadsheet_id or self._created_spreadsheet_id or self._settings.spreadsheet_id
        if target:
            try:
                await self._sheets.list_sheets(target)
                return target
            except SheetsError as exc:
                if exc.status != 404:
                    raise
                logger.warning("Spreadsheet %s not found, creating a new one", target)

        info = await self._sheets.create_spreadsheet(
            f"{SPREADSHEET_TITLE_PREFIX}-{self._clock().year}",
            self._settings.incident_sheet_title,
            INCIDENT_SHEET_HEADER,
        )
        self._created_spreadsheet_id = info.spreadsheet_id
        logger.warning(
            "Created incident spreadsheet %s; set GOOGLE_SPREADSHEET_ID to keep using it",
            info.spreadsheet_id,
        )
        return info.spreadsheet_id

    async def upload_incident_photo(
        self,
        *,
        file_data: Union[str, bytes],
        filename: str,
        incident_id: str,
        photo_type: str,
        folder_path: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> PhotoUpload:
        if isinstance(file_data, bytes):
            content, detected_mime = file_data, DEFAULT_PHOTO_MIME_TYPE
        else:
            content, detected_mime = decode_data_url(file_data)

        root_id = self._settings.drive_root_folder_id
        folder_id = root_id
        if folder_path:
            folder_id = await self._resolver.resolve_folder_path(folder_path, root_id)

        drive_name = build_photo_filename(photo_type, incident_id, filename)
        uploaded = await self._uploader.upload_file(
            content,
            drive_name,
            folder_id,
            mime_type or detected_mime,
        )
        return PhotoUpload(
            file=uploaded,
            folder_id=folder_id,
            folder_path=folder_path.strip("/") if folder_path else root_id,
        )

    async def sync_incident(
        self,
        incident: IncidentRecord,
        *,
        spreadsheet_id: Optional[str] = None,
    ) -> SyncResult:
        target_id = await self.resolve_spreadsheet_id(spreadsheet_id)
        title = self._settings.incident_sheet_title

        await self._sheets.ensure_sheet_exists(target_id, title, INCIDENT_SHEET_HEADER)
        timestamp = self._clock().isoformat()
        upsert = await self._sheets.upsert_row(target_id, title, incident.to_row(timestamp), header_rows=1)

        logger.info(
            "Incident %s %s in sheet %r (row %s)",
            incident.id,
            upsert.action,
            title,
            upsert.row_index,
        )
        return SyncResult(
            spreadsheet_id=target_id,
            sheet_title=title,
            action=upsert.action,
            row_index=upsert.row_index,
            updated_range=upsert.update.updated_range,
            updated_rows=upsert.update.updated_rows,
        )
