"""Service-account JWT assertion signing and access token caching."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import httpx
from google.auth import jwt

from ...errors import AuthError
from .credentials import CredentialStore

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600
DEFAULT_EXPIRES_IN = 3600

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"
DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"


def normalize_scopes(scopes: Iterable[str]) -> Tuple[str, ...]:
    normalized = sorted({scope.strip() for scope in scopes if scope and scope.strip()})
    if not normalized:
        raise ValueError("At least one OAuth scope is required")
    return tuple(normalized)


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float
    token_type: str = "Bearer"

    def is_expired(self, now: float, skew: float = 0) -> bool:
        return now >= self.expires_at - skew

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.value}"


class TokenIssuer:
    """Exchange signed service-account assertions for bearer tokens.

    One token is cached per distinct scope set and handed out until it is
    within ``skew_seconds`` of expiring.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        *,
        token_endpoint: str = GOOGLE_TOKEN_ENDPOINT,
        skew_seconds: int = 60,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credential_store = credential_store
        self._token_endpoint = token_endpoint
        self._skew_seconds = skew_seconds
        self._timeout = timeout
        self._clock = clock
        self._transport = transport
        self._cache: Dict[Tuple[str, ...], AccessToken] = {}

    @property
    def credential_store(self) -> CredentialStore:
        return self._credential_store

    def build_assertion(self, scopes: Iterable[str], *, now: Optional[int] = None) -> str:
        credential = self._credential_store.credential
        issued_at = int(self._clock()) if now is None else int(now)

        payload = {
            "iss": credential.client_email,
            "scope": " ".join(normalize_scopes(scopes)),
            "aud": self._token_endpoint,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        }

        # jwt.encode adds the {alg: RS256, typ: JWT, kid} header from the signer.
        assertion = jwt.encode(self._credential_store.signer, payload)
        return assertion.decode("ascii") if isinstance(assertion, bytes) else assertion

    async def get_access_token(self, scopes: Iterable[str]) -> AccessToken:
        key = normalize_scopes(scopes)
        cached = self._cache.get(key)
        if cached is not None and not cached.is_expired(self._clock(), self._skew_seconds):
            logger.debug("Reusing cached Google access token for scopes %s", key)
            return cached

        token = await self._exchange(key)
        self._cache[key] = token
        return token

    def invalidate(self, scopes: Optional[Iterable[str]] = None) -> None:
        if scopes is None:
            self._cache.clear()
            return
        self._cache.pop(normalize_scopes(scopes), None)

    async def _exchange(self, scopes: Tuple[str, ...]) -> AccessToken:
        now = int(self._clock())
        assertion = self.build_assertion(scopes, now=now)
        data = {
            "grant_type": JWT_BEARER_GRANT_TYPE,
            "assertion": assertion,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._token_endpoint, data=data)
        except httpx.HTTPError as exc:
            logger.error("Google token request could not be sent: %s", exc)
            raise AuthError(None, str(exc)) from exc

        if response.is_error:
            logger.error("Google token exchange failed: %s %s", response.status_code, response.text)
            raise AuthError(response.status_code, response.text)

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise AuthError(response.status_code, response.text, "Google token response is not JSON") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token:
            logger.error("Google token response missing access_token")
            raise AuthError(response.status_code, response.text, "Google token response missing access_token")

        try:
            expires_in = int(payload.get("expires_in") or DEFAULT_EXPIRES_IN)
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        logger.debug("Issued Google access token for scopes %s (expires in %ss)", scopes, expires_in)
        return AccessToken(
            value=access_token,
            expires_at=now + expires_in,
            token_type=str(payload.get("token_type") or "Bearer"),
        )
