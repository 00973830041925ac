from __future__ import annotations

import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from workspace_gateway.errors import (  # noqa: E402
    AuthError,
    ConfigurationError,
    CredentialError,
    DriveError,
    SheetNotFoundError,
    SheetsError,
    UploadError,
)


@pytest.mark.parametrize(
    ("status", "expected"),
    [(None, True), (429, True), (500, True), (503, True), (400, False), (403, False), (404, False)],
)
def test_retryable_follows_status(status, expected) -> None:
    assert DriveError(status, "body").retryable is expected
    assert SheetsError(status, "body").retryable is expected
    assert AuthError(status, "body").retryable is expected


def test_error_message_includes_status_and_body() -> None:
    error = UploadError(507, "storageQuotaExceeded")

    assert isinstance(error, DriveError)
    assert str(error) == "Google Drive upload failed (507): storageQuotaExceeded"


def test_configuration_errors_are_never_retryable() -> None:
    assert ConfigurationError().retryable is False
    assert isinstance(CredentialError(message="bad key"), ConfigurationError)
    assert CredentialError(message="bad key").retryable is False


def test_sheet_not_found_carries_title() -> None:
    error = SheetNotFoundError("2024-01", status=None)

    assert isinstance(error, SheetsError)
    assert error.title == "2024-01"
    assert error.available == []
    assert error.retryable is False
    assert str(error) == 'Sheet "2024-01" not found'
