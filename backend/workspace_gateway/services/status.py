from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import Settings
from ..errors import DriveError, GoogleWorkspaceError
from .google_api import GoogleApiRequester
from .google_drive.models import DRIVE_API_BASE, DRIVE_FILES_ENDPOINT
from .google_sheets import SheetsValueClient

logger = logging.getLogger(__name__)


class IntegrationStatusService:
    """Check Drive and Sheets connectivity independently of each other."""

    def __init__(
        self,
        settings: Settings,
        drive_requester: GoogleApiRequester,
        sheets: SheetsValueClient,
    ) -> None:
        self._settings = settings
        self._drive_requester = drive_requester
        self._sheets = sheets

    async def _check_drive(self) -> Dict[str, Any]:
        try:
            await self._drive_requester.request(
                "GET",
                f"{DRIVE_API_BASE}{DRIVE_FILES_ENDPOINT}",
                params={"pageSize": 1, "fields": "files(id,name)"},
                error_cls=DriveError,
            )
        except GoogleWorkspaceError as exc:
            logger.warning("Google Drive status check failed: %s", exc)
            return {"connected": False, "error": str(exc)}
        return {"connected": True, "error": None}

    async def _check_sheets(self) -> Dict[str, Any]:
        spreadsheet_id: Optional[str] = self._settings.spreadsheet_id
        if not spreadsheet_id:
            return {
                "connected": False,
                "spreadsheetId": None,
                "error": "GOOGLE_SPREADSHEET_ID environment variable not set",
            }
        try:
            info = await self._sheets.list_sheets(spreadsheet_id)
        except GoogleWorkspaceError as exc:
            logger.warning("Google Sheets status check failed: %s", exc)
            return {"connected": False, "spreadsheetId": None, "error": str(exc)}
        return {"connected": True, "spreadsheetId": info.spreadsheet_id, "error": None}

    async def check(self) -> Dict[str, Any]:
        drive = await self._check_drive()
        sheets = await self._check_sheets()
        return {
            "success": bool(drive["connected"] or sheets["connected"]),
            "googleDrive": drive,
            "googleSheets": sheets,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
