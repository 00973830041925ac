from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ..config import Settings
from ..dependencies import get_drive_resolver, get_incident_service, get_settings
from ..services.google_drive import DriveResourceResolver
from ..services.incidents import IncidentRecordService

router = APIRouter(prefix="/api/google/drive", tags=["Google Drive"])


class DriveUploadRequest(BaseModel):
    file: str = Field(..., description="Base64 encoded file, optionally as a data URL")
    filename: str = Field(..., min_length=1)
    incident_id: str = Field(..., alias="incidentId", min_length=1)
    photo_type: str = Field(..., alias="photoType", min_length=1, description="odo_awal, tim_awal, ...")
    folder_path: Optional[str] = Field(None, alias="folderPath")

    model_config = ConfigDict(populate_by_name=True)


class CreateFolderRequest(BaseModel):
    folder_name: str = Field(..., alias="folderName", min_length=1)
    parent_folder_id: Optional[str] = Field(None, alias="parentFolderId")

    model_config = ConfigDict(populate_by_name=True)


@router.post("/upload")
async def upload_photo(
    payload: DriveUploadRequest,
    incident_service: IncidentRecordService = Depends(get_incident_service),
) -> Dict[str, Any]:
    try:
        result = await incident_service.upload_incident_photo(
            file_data=payload.file,
            filename=payload.filename,
            incident_id=payload.incident_id,
            photo_type=payload.photo_type,
            folder_path=payload.folder_path,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return {
        "success": True,
        "fileId": result.file.id,
        "fileName": result.file.name,
        "webViewLink": result.file.web_view_link,
        "webContentLink": result.file.web_content_link,
        "folderId": result.folder_id,
        "folderPath": result.folder_path,
    }


@router.post("/folders")
async def create_folder(
    payload: CreateFolderRequest,
    resolver: DriveResourceResolver = Depends(get_drive_resolver),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    parent_id = payload.parent_folder_id or settings.drive_root_folder_id
    try:
        folder_id = await resolver.get_or_create_folder(payload.folder_name, parent_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return {
        "success": True,
        "folderId": folder_id,
        "folderName": payload.folder_name,
        "parentFolderId": parent_id,
    }


@router.get("/files")
async def list_files(
    folder_id: Optional[str] = Query(None, alias="folderId"),
    resolver: DriveResourceResolver = Depends(get_drive_resolver),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    parent_id = folder_id or settings.drive_root_folder_id
    items = await resolver.list_children(parent_id)
    return {
        "success": True,
        "folderId": parent_id,
        "files": [item.to_dict() for item in items],
    }
