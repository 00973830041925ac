from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..config import Settings
from ..dependencies import get_incident_service, get_settings, get_sheets_client
from ..services.google_sheets import SheetsValueClient, quote_sheet_title, sheet_title_from_range
from ..services.incidents import IncidentRecord, IncidentRecordService

router = APIRouter(prefix="/api/google/sheets", tags=["Google Sheets"])


class SheetReadRequest(BaseModel):
    sheet_name: str = Field(..., alias="sheetName", min_length=1)
    range: Optional[str] = Field(None, description="A1 range such as 'A1:Z100'; defaults to the whole sheet")

    model_config = ConfigDict(populate_by_name=True)


class SheetAppendRequest(BaseModel):
    sheet_name: str = Field(..., alias="sheetName", min_length=1)
    data: List[List[Any]] = Field(..., description="Rows of cell values to append")
    range: str = Field("A:Z")

    model_config = ConfigDict(populate_by_name=True)


class IncidentDataModel(BaseModel):
    id: str = Field(..., min_length=1)
    tanggal: str
    waktu: str
    lokasi: str
    deskripsi: str
    teknisi: str
    status: str
    prioritas: str


class SheetSyncRequest(BaseModel):
    incident_data: IncidentDataModel = Field(..., alias="incidentData")

    model_config = ConfigDict(populate_by_name=True)


def _require_spreadsheet_id(settings: Settings) -> str:
    if not settings.spreadsheet_id:
        raise HTTPException(status_code=500, detail="GOOGLE_SPREADSHEET_ID is not configured")
    return settings.spreadsheet_id


def _qualified_range(sheet_name: str, range_: Optional[str]) -> str:
    if not range_:
        return quote_sheet_title(sheet_name)
    if "!" in range_:
        # A range naming a sheet must name the requested one.
        if sheet_title_from_range(range_) != sheet_name:
            raise HTTPException(
                status_code=422,
                detail=f"Range {range_!r} does not address sheet {sheet_name!r}",
            )
        return range_
    return f"{quote_sheet_title(sheet_name)}!{range_}"


@router.get("")
async def list_sheets(
    sheets: SheetsValueClient = Depends(get_sheets_client),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    info = await sheets.list_sheets(_require_spreadsheet_id(settings))
    return {
        "success": True,
        "spreadsheetId": info.spreadsheet_id,
        "spreadsheetTitle": info.title,
        "sheets": [sheet.to_dict() for sheet in info.sheets],
    }


@router.post("/read")
async def read_sheet(
    payload: SheetReadRequest,
    sheets: SheetsValueClient = Depends(get_sheets_client),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    read_range = _qualified_range(payload.sheet_name, payload.range)
    rows = await sheets.read_range(_require_spreadsheet_id(settings), read_range)
    return {
        "success": True,
        "sheetName": payload.sheet_name,
        "range": read_range,
        "data": rows,
        "rowCount": len(rows),
    }


@router.post("/append")
async def append_rows(
    payload: SheetAppendRequest,
    sheets: SheetsValueClient = Depends(get_sheets_client),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    spreadsheet_id = _require_spreadsheet_id(settings)
    append_range = _qualified_range(payload.sheet_name, payload.range)
    await sheets.require_sheet(spreadsheet_id, payload.sheet_name)

    result = await sheets.append_rows(spreadsheet_id, append_range, payload.data)
    return {
        "success": True,
        "spreadsheetId": spreadsheet_id,
        "sheetName": payload.sheet_name,
        "updatedRange": result.updated_range,
        "updatedRows": result.updated_rows,
    }


@router.post("/sync")
async def sync_incident(
    payload: SheetSyncRequest,
    incident_service: IncidentRecordService = Depends(get_incident_service),
) -> Dict[str, Any]:
    incident = IncidentRecord(**payload.incident_data.model_dump())
    result = await incident_service.sync_incident(incident)
    return {"success": True, **result.to_dict()}
