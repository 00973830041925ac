from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from .errors import CredentialError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_FRONTEND_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:5174",
)


@dataclass(frozen=True)
class Settings:
    """Application configuration loaded from environment variables."""

    google_client_email: str
    google_private_key: str
    google_private_key_id: str
    google_project_id: str
    spreadsheet_id: Optional[str] = None
    drive_root_folder_id: str = "root"
    frontend_origins: Tuple[str, ...] = field(default=DEFAULT_FRONTEND_ORIGINS)
    http_timeout: float = 10.0
    token_skew_seconds: int = 60
    value_input_option: str = "USER_ENTERED"
    incident_sheet_title: str = "Sheet1"

    @property
    def has_service_account(self) -> bool:
        return bool(
            self.google_client_email
            and self.google_private_key
            and self.google_private_key_id
            and self.google_project_id
        )


def _read_key_file(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with Path(path).expanduser().open("r", encoding="utf-8") as fp:
            raw = json.load(fp)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Service account key file %s could not be read: %s", path, exc)
        raise CredentialError(message=f"Service account key file {path} could not be read: {exc}") from exc
    if not isinstance(raw, dict):
        raise CredentialError(message=f"Service account key file {path} does not contain a JSON object")
    return raw


def _parse_origins(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return DEFAULT_FRONTEND_ORIGINS
    origins = tuple(origin.strip() for origin in value.split(",") if origin.strip())
    return origins or DEFAULT_FRONTEND_ORIGINS


def load_settings() -> Settings:
    # Explicit environment values win over the JSON key file.
    key_file = _read_key_file(os.getenv("GOOGLE_APPLICATION_CREDENTIALS"))

    private_key = os.getenv("GOOGLE_PRIVATE_KEY") or str(key_file.get("private_key") or "")
    # Deployment consoles usually store the PEM on one line with literal "\n".
    private_key = private_key.replace("\\n", "\n")

    spreadsheet_id = os.getenv("GOOGLE_SPREADSHEET_ID") or os.getenv("GOOGLE_SHEETS_ID")

    return Settings(
        google_client_email=os.getenv("GOOGLE_CLIENT_EMAIL") or str(key_file.get("client_email") or ""),
        google_private_key=private_key,
        google_private_key_id=os.getenv("GOOGLE_PRIVATE_KEY_ID") or str(key_file.get("private_key_id") or ""),
        google_project_id=os.getenv("GOOGLE_PROJECT_ID") or str(key_file.get("project_id") or ""),
        spreadsheet_id=spreadsheet_id or None,
        drive_root_folder_id=os.getenv("GOOGLE_DRIVE_ROOT_FOLDER_ID", "root") or "root",
        frontend_origins=_parse_origins(os.getenv("FRONTEND_ORIGINS")),
        http_timeout=float(os.getenv("GOOGLE_HTTP_TIMEOUT", "10")),
        token_skew_seconds=int(os.getenv("GOOGLE_TOKEN_SKEW_SECONDS", "60")),
        value_input_option=os.getenv("GOOGLE_SHEETS_VALUE_INPUT_OPTION", "USER_ENTERED"),
        incident_sheet_title=os.getenv("INCIDENT_SHEET_TITLE", "Sheet1"),
    )
