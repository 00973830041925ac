from __future__ import annotations

from fastapi import Depends, Request

from .config import Settings
from .container import Container
from .services.google_drive import DriveResourceResolver
from .services.google_sheets import SheetsValueClient
from .services.incidents import IncidentRecordService
from .services.status import IntegrationStatusService


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if not isinstance(container, Container):
        raise RuntimeError("Application container is not configured on FastAPI app state.")
    return container


def get_settings(container: Container = Depends(get_container)) -> Settings:
    return container.settings


def get_drive_resolver(container: Container = Depends(get_container)) -> DriveResourceResolver:
    return container.drive_resolver


def get_sheets_client(container: Container = Depends(get_container)) -> SheetsValueClient:
    return container.sheets_client


def get_incident_service(container: Container = Depends(get_container)) -> IncidentRecordService:
    return container.incident_service


def get_status_service(container: Container = Depends(get_container)) -> IntegrationStatusService:
    return container.status_service
