from __future__ import annotations

from typing import Optional

import httpx

from .config import Settings, load_settings
from .services.google_api import GoogleApiRequester
from .services.google_auth import DRIVE_SCOPE, SHEETS_SCOPE, CredentialStore, TokenIssuer
from .services.google_drive import DriveResourceResolver, DriveUploader
from .services.google_sheets import SheetsValueClient
from .services.incidents import IncidentRecordService
from .services.status import IntegrationStatusService


class Container:
    """Application service container for dependency management."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or load_settings()
        timeout = self._settings.http_timeout

        self._credential_store = CredentialStore.from_settings(self._settings)
        self._token_issuer = TokenIssuer(
            self._credential_store,
            skew_seconds=self._settings.token_skew_seconds,
            timeout=timeout,
            transport=transport,
        )

        drive_requester = GoogleApiRequester(
            self._token_issuer, (DRIVE_SCOPE,), timeout=timeout, transport=transport
        )
        sheets_requester = GoogleApiRequester(
            self._token_issuer, (SHEETS_SCOPE,), timeout=timeout, transport=transport
        )

        self._drive_resolver = DriveResourceResolver(drive_requester)
        self._drive_uploader = DriveUploader(
            self._token_issuer,
            scopes=(DRIVE_SCOPE,),
            timeout=max(timeout, 30.0),
            transport=transport,
        )
        self._sheets_client = SheetsValueClient(
            sheets_requester,
            value_input_option=self._settings.value_input_option,
        )
        self._incident_service = IncidentRecordService(
            self._settings,
            self._drive_resolver,
            self._drive_uploader,
            self._sheets_client,
        )
        self._status_service = IntegrationStatusService(
            self._settings,
            drive_requester,
            self._sheets_client,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def credential_store(self) -> CredentialStore:
        return self._credential_store

    @property
    def token_issuer(self) -> TokenIssuer:
        return self._token_issuer

    @property
    def drive_resolver(self) -> DriveResourceResolver:
        return self._drive_resolver

    @property
    def drive_uploader(self) -> DriveUploader:
        return self._drive_uploader

    @property
    def sheets_client(self) -> SheetsValueClient:
        return self._sheets_client

    @property
    def incident_service(self) -> IncidentRecordService:
        return self._incident_service

    @property
    def status_service(self) -> IntegrationStatusService:
        return self._status_service
