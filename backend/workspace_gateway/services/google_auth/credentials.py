"""Service-account key material parsing and validation."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from google.auth import crypt

from ...config import Settings
from ...errors import CredentialError

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")

__all__ = [
    "ServiceAccountCredential",
    "CredentialStore",
]


@dataclass(frozen=True)
class ServiceAccountCredential:
    client_email: str
    private_key_pem: str
    private_key_id: str
    project_id: str


class CredentialStore:
    """Hold the service-account credential and its RS256 signer.

    Validation is deferred until the credential is first needed so that an
    application without Google configuration can still start; the parsed
    credential and signer are cached for the lifetime of the store.
    """

    def __init__(
        self,
        *,
        client_email: str,
        private_key_pem: str,
        private_key_id: str,
        project_id: str,
    ) -> None:
        self._client_email = client_email
        self._private_key_pem = private_key_pem
        self._private_key_id = private_key_id
        self._project_id = project_id
        self._credential: Optional[ServiceAccountCredential] = None
        self._signer: Optional[crypt.Signer] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(
            client_email=settings.google_client_email,
            private_key_pem=settings.google_private_key,
            private_key_id=settings.google_private_key_id,
            project_id=settings.google_project_id,
        )

    @classmethod
    def from_service_account_info(cls, info: Mapping[str, Any]) -> "CredentialStore":
        """Build a store from the JSON key file Google issues for a service account."""

        account_type = info.get("type")
        if account_type is not None and account_type != "service_account":
            raise CredentialError(message=f"Unsupported credential type: {account_type}")
        return cls(
            client_email=str(info.get("client_email") or ""),
            private_key_pem=str(info.get("private_key") or ""),
            private_key_id=str(info.get("private_key_id") or ""),
            project_id=str(info.get("project_id") or ""),
        )

    @property
    def credential(self) -> ServiceAccountCredential:
        if self._credential is None:
            self._credential = self._validate()
        return self._credential

    @property
    def signer(self) -> crypt.Signer:
        if self._signer is None:
            credential = self.credential
            self._signer = self._load_signer(credential.private_key_pem, credential.private_key_id)
        return self._signer

    def _validate(self) -> ServiceAccountCredential:
        missing = [
            name
            for name, value in (
                ("client_email", self._client_email),
                ("private_key", self._private_key_pem),
                ("private_key_id", self._private_key_id),
                ("project_id", self._project_id),
            )
            if not (value or "").strip()
        ]
        if missing:
            raise CredentialError(
                message=f"Service account configuration is missing: {', '.join(missing)}"
            )

        client_email = self._client_email.strip()
        if not _EMAIL_PATTERN.match(client_email):
            raise CredentialError(message="Service account client_email is malformed")

        return ServiceAccountCredential(
            client_email=client_email,
            private_key_pem=self._private_key_pem.replace("\\n", "\n"),
            private_key_id=self._private_key_id.strip(),
            project_id=self._project_id.strip(),
        )

    @staticmethod
    def _load_signer(pem: str, key_id: str) -> crypt.Signer:
        try:
            return crypt.RSASigner.from_string(pem, key_id=key_id)
        except (ValueError, TypeError) as exc:
            logger.error("Service account private key could not be parsed: %s", exc)
            raise CredentialError(message="Private key is not a valid RSA private key") from exc
