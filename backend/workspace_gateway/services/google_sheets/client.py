"""Row-level value access for Google Sheets spreadsheets."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote

import httpx

from ...errors import SheetNotFoundError, SheetsError
from ..google_api import GoogleApiRequester, parse_json_response
from ..google_auth import SHEETS_SCOPE, TokenIssuer
from .a1 import column_letter, column_range, quote_sheet_title, row_range, sheet_title_from_range

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4"
VALUE_INPUT_OPTIONS = ("USER_ENTERED", "RAW")
_UNPARSABLE_RANGE_MARKER = "Unable to parse range"

Rows = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class SpreadsheetSheet:
    spreadsheet_id: str
    title: str
    sheet_id: int
    row_count: int = 0
    column_count: int = 0

    @classmethod
    def from_properties(cls, spreadsheet_id: str, properties: Dict[str, Any]) -> "SpreadsheetSheet":
        grid = properties.get("gridProperties") or {}
        return cls(
            spreadsheet_id=spreadsheet_id,
            title=str(properties.get("title") or ""),
            sheet_id=int(properties.get("sheetId") or 0),
            row_count=int(grid.get("rowCount") or 0),
            column_count=int(grid.get("columnCount") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheetId": self.sheet_id,
            "title": self.title,
            "gridProperties": {
                "rowCount": self.row_count,
                "columnCount": self.column_count,
            },
        }


@dataclass(frozen=True)
class SpreadsheetInfo:
    spreadsheet_id: str
    title: str
    sheets: List[SpreadsheetSheet] = field(default_factory=list)

    @property
    def titles(self) -> List[str]:
        return [sheet.title for sheet in self.sheets]

    def get(self, title: str) -> Optional[SpreadsheetSheet]:
        for sheet in self.sheets:
            if sheet.title == title:
                return sheet
        return None


@dataclass(frozen=True)
class ValueUpdate:
    updated_range: Optional[str]
    updated_rows: int


class SheetsValueClient:
    """Read, append and update 2-D value ranges in a spreadsheet."""

    def __init__(
        self,
        requester: GoogleApiRequester,
        *,
        api_base: str = SHEETS_API_BASE,
        value_input_option: str = "USER_ENTERED",
    ) -> None:
        if value_input_option not in VALUE_INPUT_OPTIONS:
            raise ValueError(f"valueInputOption must be one of {VALUE_INPUT_OPTIONS}")
        self._requester = requester
        self._api_base = api_base.rstrip("/")
        self._value_input_option = value_input_option

    @classmethod
    def from_issuer(
        cls,
        token_issuer: TokenIssuer,
        *,
        scopes: Iterable[str] = (SHEETS_SCOPE,),
        value_input_option: str = "USER_ENTERED",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SheetsValueClient":
        requester = GoogleApiRequester(token_issuer, scopes, timeout=timeout, transport=transport)
        return cls(requester, value_input_option=value_input_option)

    @property
    def value_input_option(self) -> str:
        return self._value_input_option

    def _spreadsheet_url(self, spreadsheet_id: str) -> str:
        return f"{self._api_base}/spreadsheets/{quote(spreadsheet_id, safe='')}"

    def _values_url(self, spreadsheet_id: str, range_: str, suffix: str = "") -> str:
        return f"{self._spreadsheet_url(spreadsheet_id)}/values/{quote(range_, safe='')}{suffix}"

    async def _values_request(
        self,
        method: str,
        spreadsheet_id: str,
        range_: str,
        *,
        suffix: str = "",
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = self._values_url(spreadsheet_id, range_, suffix)
        response = await self._requester.send(
            method,
            url,
            params=params,
            json_data=json_data,
            error_cls=SheetsError,
        )
        if response.status_code == 400 and _UNPARSABLE_RANGE_MARKER in response.text:
            # The Sheets API reports a missing tab as an unparsable range.
            raise SheetNotFoundError(sheet_title_from_range(range_), status=404, body=response.text)
        return parse_json_response(response, method=method, url=url, error_cls=SheetsError)

    # Metadata ----------------------------------------------------------
    async def list_sheets(self, spreadsheet_id: str) -> SpreadsheetInfo:
        data = await self._requester.request(
            "GET",
            self._spreadsheet_url(spreadsheet_id),
            params={"fields": "spreadsheetId,properties.title,sheets.properties"},
            error_cls=SheetsError,
        )
        properties = data.get("properties") or {}
        sheets = [
            SpreadsheetSheet.from_properties(spreadsheet_id, entry.get("properties") or {})
            for entry in data.get("sheets") or []
            if isinstance(entry, dict)
        ]
        return SpreadsheetInfo(
            spreadsheet_id=str(data.get("spreadsheetId") or spreadsheet_id),
            title=str(properties.get("title") or ""),
            sheets=sheets,
        )

    async def get_sheet(self, spreadsheet_id: str, title: str) -> Optional[SpreadsheetSheet]:
        info = await self.list_sheets(spreadsheet_id)
        return info.get(title)

    async def require_sheet(self, spreadsheet_id: str, title: str) -> SpreadsheetSheet:
        info = await self.list_sheets(spreadsheet_id)
        sheet = info.get(title)
        if sheet is None:
            raise SheetNotFoundError(title, available=info.titles)
        return sheet

    async def create_spreadsheet(
        self,
        title: str,
        sheet_title: str,
        header_row: Sequence[Any] = (),
    ) -> SpreadsheetInfo:
        """Create a spreadsheet whose single sheet carries ``header_row`` in row 1."""

        sheet: Dict[str, Any] = {"properties": {"title": sheet_title}}
        if header_row:
            sheet["data"] = [
                {
                    "rowData": [
                        {"values": [{"userEnteredValue": {"stringValue": str(cell)}} for cell in header_row]}
                    ]
                }
            ]

        data = await self._requester.request(
            "POST",
            f"{self._api_base}/spreadsheets",
            json_data={"properties": {"title": title}, "sheets": [sheet]},
            error_cls=SheetsError,
        )
        spreadsheet_id = data.get("spreadsheetId")
        if not spreadsheet_id:
            raise SheetsError(None, str(data), "Spreadsheet creation response missing spreadsheetId")

        properties = data.get("properties") or {}
        sheets = [
            SpreadsheetSheet.from_properties(spreadsheet_id, entry.get("properties") or {})
            for entry in data.get("sheets") or []
            if isinstance(entry, dict)
        ]
        logger.info("Created spreadsheet %r (%s)", title, spreadsheet_id)
        return SpreadsheetInfo(
            spreadsheet_id=str(spreadsheet_id),
            title=str(properties.get("title") or title),
            sheets=sheets,
        )

    async def ensure_sheet_exists(
        self,
        spreadsheet_id: str,
        title: str,
        header_row: Sequence[Any] = (),
    ) -> SpreadsheetSheet:
        """Create ``title`` with ``header_row`` in row 1 unless it already exists.

        An existing sheet is returned untouched; its header is not checked.
        """

        existing = await self.get_sheet(spreadsheet_id, title)
        if existing is not None:
            return existing

        data = await self._requester.request(
            "POST",
            f"{self._spreadsheet_url(spreadsheet_id)}:batchUpdate",
            json_data={"requests": [{"addSheet": {"properties": {"title": title}}}]},
            error_cls=SheetsError,
        )
        replies = data.get("replies") or []
        properties: Dict[str, Any] = {"title": title}
        if replies and isinstance(replies[0], dict):
            properties = (replies[0].get("addSheet") or {}).get("properties") or properties
        sheet = SpreadsheetSheet.from_properties(spreadsheet_id, properties)
        logger.info("Added sheet %r to spreadsheet %s", title, spreadsheet_id)

        if header_row:
            await self.update_range(
                spreadsheet_id,
                f"{quote_sheet_title(title)}!A1:{column_letter(len(header_row))}1",
                [list(header_row)],
            )
        return sheet

    # Values ------------------------------------------------------------
    async def read_range(self, spreadsheet_id: str, range_: str) -> List[List[Any]]:
        data = await self._values_request("GET", spreadsheet_id, range_)
        values = data.get("values")
        if not isinstance(values, list):
            return []
        return [list(row) if isinstance(row, list) else [row] for row in values]

    async def append_rows(self, spreadsheet_id: str, range_: str, rows: Rows) -> ValueUpdate:
        data = await self._values_request(
            "POST",
            spreadsheet_id,
            range_,
            suffix=":append",
            params={
                "valueInputOption": self._value_input_option,
                "insertDataOption": "INSERT_ROWS",
            },
            json_data={"majorDimension": "ROWS", "values": [list(row) for row in rows]},
        )
        updates = data.get("updates") or {}
        return ValueUpdate(
            updated_range=updates.get("updatedRange"),
            updated_rows=int(updates.get("updatedRows") or 0),
        )

    async def update_range(self, spreadsheet_id: str, range_: str, rows: Rows) -> ValueUpdate:
        data = await self._values_request(
            "PUT",
            spreadsheet_id,
            range_,
            params={"valueInputOption": self._value_input_option},
            json_data={"range": range_, "majorDimension": "ROWS", "values": [list(row) for row in rows]},
        )
        return ValueUpdate(
            updated_range=data.get("updatedRange"),
            updated_rows=int(data.get("updatedRows") or 0),
        )

    async def find_row_by_key(
        self,
        spreadsheet_id: str,
        sheet_title: str,
        key: str,
        *,
        start_row: int = 1,
    ) -> int:
        """Return the 1-based row at or after ``start_row`` whose column A equals ``key``, or 0."""

        column = await self.read_range(spreadsheet_id, column_range(sheet_title))
        for index, row in enumerate(column, start=1):
            if index < start_row:
                continue
            if row and str(row[0]) == key:
                return index
        return 0

    async def upsert_row(
        self,
        spreadsheet_id: str,
        sheet_title: str,
        row: Sequence[Any],
        *,
        header_rows: int = 0,
    ) -> "UpsertResult":
        """Update the row keyed by ``row[0]`` in place, or append it.

        The first ``header_rows`` rows are never matched.
        """

        if not row:
            raise ValueError("Row must contain a key in its first column")

        row_index = await self.find_row_by_key(
            spreadsheet_id,
            sheet_title,
            str(row[0]),
            start_row=header_rows + 1,
        )
        if row_index:
            update = await self.update_range(
                spreadsheet_id,
                row_range(sheet_title, row_index, len(row)),
                [list(row)],
            )
            return UpsertResult(action="updated", row_index=row_index, update=update)

        update = await self.append_rows(spreadsheet_id, quote_sheet_title(sheet_title), [list(row)])
        return UpsertResult(action="appended", row_index=_row_from_range(update.updated_range), update=update)


@dataclass(frozen=True)
class UpsertResult:
    action: str
    row_index: int
    update: ValueUpdate


def _row_from_range(updated_range: Optional[str]) -> int:
    """Extract the first row number from e.g. ``'Sheet1'!A5:I5``; 0 when unknown."""

    if not updated_range or "!" not in updated_range:
        return 0
    cells = updated_range.rsplit("!", 1)[1].split(":", 1)[0]
    digits = "".join(char for char in cells if char.isdigit())
    return int(digits) if digits else 0
