"""Multipart (metadata + media) uploads to Google Drive."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import httpx

from ...errors import UploadError
from ..google_api import parse_json_response
from ..google_auth import DRIVE_SCOPE, AccessToken, TokenIssuer
from .models import DRIVE_FILES_ENDPOINT, DRIVE_UPLOAD_BASE, DriveFile

logger = logging.getLogger(__name__)

MULTIPART_BOUNDARY = "-------314159265358979323846"
UPLOAD_RESPONSE_FIELDS = "id,name,mimeType,parents,webViewLink,webContentLink"


@dataclass(frozen=True)
class MultipartBody:
    content: bytes
    content_type: str
    content_length: int


def build_multipart_body(
    metadata: Mapping[str, Any],
    payload: bytes,
    mime_type: str,
    *,
    boundary: str = MULTIPART_BOUNDARY,
) -> MultipartBody:
    """Encode a ``multipart/related`` body holding JSON metadata and the raw payload.

    The declared length is computed from the three encoded segments and must
    match the assembled body exactly; a mismatch raises ``AssertionError``.
    """

    delimiter = f"\r\n--{boundary}\r\n"
    close_delimiter = f"\r\n--{boundary}--"

    head = (
        delimiter
        + "Content-Type: application/json\r\n\r\n"
        + json.dumps(dict(metadata), ensure_ascii=False, separators=(",", ":"))
        + delimiter
        + f"Content-Type: {mime_type}\r\n\r\n"
    ).encode("utf-8")
    tail = close_delimiter.encode("ascii")

    content_length = len(head) + len(payload) + len(tail)
    body = b"".join((head, payload, tail))
    if len(body) != content_length:
        raise AssertionError(
            f"multipart body length {len(body)} does not match computed length {content_length}"
        )

    return MultipartBody(
        content=body,
        content_type=f'multipart/related; boundary="{boundary}"',
        content_length=content_length,
    )


class DriveUploader:
    """Upload binary content to Drive in a single multipart request."""

    def __init__(
        self,
        token_issuer: TokenIssuer,
        *,
        scopes: Iterable[str] = (DRIVE_SCOPE,),
        upload_base: str = DRIVE_UPLOAD_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token_issuer = token_issuer
        self._scopes = tuple(scopes)
        self._upload_base = upload_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def upload(
        self,
        access_token: Union[AccessToken, str],
        content: bytes,
        filename: str,
        parent_id: str,
        mime_type: str,
    ) -> DriveFile:
        token_value = access_token.value if isinstance(access_token, AccessToken) else access_token
        metadata = {
            "name": filename,
            "parents": [parent_id],
        }
        body = build_multipart_body(metadata, content, mime_type)

        headers = {
            "Authorization": f"Bearer {token_value}",
            "Content-Type": body.content_type,
            "Content-Length": str(body.content_length),
        }
        params = {
            "uploadType": "multipart",
            "supportsAllDrives": "true",
            "fields": UPLOAD_RESPONSE_FIELDS,
        }
        url = f"{self._upload_base}{DRIVE_FILES_ENDPOINT}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, params=params, headers=headers, content=body.content)
        except httpx.HTTPError as exc:
            logger.error("Google Drive file upload could not be sent for %s: %s", filename, exc)
            raise UploadError(None, str(exc)) from exc

        data = parse_json_response(response, method="POST", url=url, error_cls=UploadError)
        if not data.get("id"):
            logger.error("Google Drive file upload response missing id: %s", data)
            raise UploadError(response.status_code, response.text, "Google Drive upload response missing id")

        logger.info("Uploaded %s (%d bytes) to Drive folder %s", filename, len(content), parent_id)
        return self._to_drive_file(data, filename=filename, parent_id=parent_id, mime_type=mime_type)

    async def upload_file(
        self,
        content: bytes,
        filename: str,
        parent_id: str,
        mime_type: str,
    ) -> DriveFile:
        token = await self._token_issuer.get_access_token(self._scopes)
        return await self.upload(token, content, filename, parent_id, mime_type)

    @staticmethod
    def _to_drive_file(
        data: Dict[str, Any],
        *,
        filename: str,
        parent_id: str,
        mime_type: str,
    ) -> DriveFile:
        parents = data.get("parents")
        resolved_parent = str(parents[0]) if isinstance(parents, list) and parents else parent_id
        web_view_link = data.get("webViewLink")
        web_content_link = data.get("webContentLink")
        return DriveFile(
            id=str(data["id"]),
            name=str(data.get("name") or filename),
            parent_id=resolved_parent,
            mime_type=str(data.get("mimeType") or mime_type),
            web_view_link=web_view_link if isinstance(web_view_link, str) else None,
            web_content_link=web_content_link if isinstance(web_content_link, str) else None,
        )
