from .credentials import CredentialStore, ServiceAccountCredential
from .token_issuer import (
    DRIVE_FILE_SCOPE,
    DRIVE_READONLY_SCOPE,
    DRIVE_SCOPE,
    GOOGLE_TOKEN_ENDPOINT,
    SHEETS_SCOPE,
    AccessToken,
    TokenIssuer,
)

__all__ = [
    "AccessToken",
    "CredentialStore",
    "DRIVE_FILE_SCOPE",
    "DRIVE_READONLY_SCOPE",
    "DRIVE_SCOPE",
    "GOOGLE_TOKEN_ENDPOINT",
    "SHEETS_SCOPE",
    "ServiceAccountCredential",
    "TokenIssuer",
]
