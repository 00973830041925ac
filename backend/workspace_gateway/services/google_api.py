"""Authorised HTTP plumbing shared by the Drive and Sheets clients."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type

import httpx

from ..errors import GoogleWorkspaceError
from .google_auth import TokenIssuer
from .google_auth.token_issuer import normalize_scopes

logger = logging.getLogger(__name__)


class GoogleApiRequester:
    """Send bearer-authenticated requests and map failures to typed errors."""

    def __init__(
        self,
        token_issuer: TokenIssuer,
        scopes: Iterable[str],
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token_issuer = token_issuer
        self._scopes: Tuple[str, ...] = normalize_scopes(scopes)
        self._timeout = timeout
        self._transport = transport

    @property
    def token_issuer(self) -> TokenIssuer:
        return self._token_issuer

    @property
    def scopes(self) -> Tuple[str, ...]:
        return self._scopes

    async def authorization_headers(self) -> Dict[str, str]:
        token = await self._token_issuer.get_access_token(self._scopes)
        return {
            "Authorization": token.authorization_header,
            "Accept": "application/json",
        }

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        error_cls: Type[GoogleWorkspaceError] = GoogleWorkspaceError,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a request and return the raw response, which may be an error response."""

        request_headers = await self.authorization_headers()
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient(
                timeout=timeout or self._timeout,
                transport=self._transport,
            ) as client:
                return await client.request(
                    method,
                    url,
                    params=params,
                    json=json_data,
                    content=content,
                    headers=request_headers,
                )
        except httpx.HTTPError as exc:
            logger.error("Google API request could not be sent: %s %s -> %s", method, url, exc)
            raise error_cls(None, str(exc)) from exc

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        error_cls: Type[GoogleWorkspaceError] = GoogleWorkspaceError,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        response = await self.send(
            method,
            url,
            params=params,
            json_data=json_data,
            content=content,
            headers=headers,
            error_cls=error_cls,
            timeout=timeout,
        )
        return parse_json_response(response, method=method, url=url, error_cls=error_cls)


def parse_json_response(
    response: httpx.Response,
    *,
    method: str,
    url: str,
    error_cls: Type[GoogleWorkspaceError],
) -> Dict[str, Any]:
    if response.is_error:
        logger.error(
            "Google API request failed: %s %s -> %s %s",
            method,
            url,
            response.status_code,
            response.text,
        )
        raise error_cls(response.status_code, response.text)

    if not response.content:
        return {}

    try:
        payload = response.json()
    except ValueError as exc:
        logger.error("Google API response is not JSON for %s %s: %s", method, url, response.text)
        raise error_cls(response.status_code, response.text, "Google API response is not JSON") from exc

    if not isinstance(payload, dict):
        logger.error("Unexpected Google API response type for %s %s: %s", method, url, payload)
        raise error_cls(response.status_code, response.text, "Google API response is not an object")
    return payload
