"""Typed failures raised by the Google access layer."""
from __future__ import annotations

from typing import Optional

__all__ = [
    "GoogleWorkspaceError",
    "ConfigurationError",
    "CredentialError",
    "AuthError",
    "DriveError",
    "UploadError",
    "SheetsError",
    "SheetNotFoundError",
]


class GoogleWorkspaceError(Exception):
    """Base error carrying the upstream status code and response body.

    ``status`` is ``None`` when no HTTP response was received (timeouts,
    connection failures).
    """

    default_message = "Google Workspace request failed"

    def __init__(
        self,
        status: Optional[int] = None,
        body: str = "",
        message: Optional[str] = None,
    ) -> None:
        self.status = status
        self.body = body
        self.message = message or self.default_message
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.status is not None:
            text = f"{text} ({self.status})"
        if self.body:
            text = f"{text}: {self.body}"
        return text

    @property
    def retryable(self) -> bool:
        if self.status is None:
            return True
        return self.status == 429 or self.status >= 500


class ConfigurationError(GoogleWorkspaceError):
    default_message = "Google integration is not configured"

    @property
    def retryable(self) -> bool:
        return False


class CredentialError(ConfigurationError):
    default_message = "Service account credentials are invalid"


class AuthError(GoogleWorkspaceError):
    default_message = "Google token exchange failed"


class DriveError(GoogleWorkspaceError):
    default_message = "Google Drive request failed"


class UploadError(DriveError):
    default_message = "Google Drive upload failed"


class SheetsError(GoogleWorkspaceError):
    default_message = "Google Sheets request failed"


class SheetNotFoundError(SheetsError):
    default_message = "Sheet not found"

    def __init__(
        self,
        title: str,
        available: Optional[list] = None,
        status: Optional[int] = 404,
        body: str = "",
    ) -> None:
        self.title = title
        self.available = list(available or [])
        if available is not None:
            listing = ", ".join(self.available) or "none"
            message = f'Sheet "{title}" not found. Available sheets: {listing}'
        else:
            message = f'Sheet "{title}" not found'
        super().__init__(status=status, body=body, message=message)

    @property
    def retryable(self) -> bool:
        return False
