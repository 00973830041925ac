from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from google_fakes import FOLDER_MIME, FakeClock, FakeGoogleWorkspace, make_credential_store  # noqa: E402
from workspace_gateway.errors import DriveError  # noqa: E402
from workspace_gateway.services.google_auth import TokenIssuer  # noqa: E402
from workspace_gateway.services.google_drive import DriveResourceResolver  # noqa: E402
from workspace_gateway.services.google_drive.naming import escape_query_value  # noqa: E402


def _resolver(fake: FakeGoogleWorkspace) -> DriveResourceResolver:
    issuer = TokenIssuer(make_credential_store(), clock=FakeClock(), transport=fake.transport)
    return DriveResourceResolver.from_issuer(issuer, transport=fake.transport)


def test_get_or_create_folder_is_idempotent_for_sequential_calls() -> None:
    fake = FakeGoogleWorkspace()
    resolver = _resolver(fake)

    async def _run():
        first = await resolver.get_or_create_folder("Reports", "root")
        second = await resolver.get_or_create_folder("Reports", "root")
        return first, second

    first, second = asyncio.run(_run())

    assert first == second
    assert len(fake.folders) == 1
    assert fake.count("POST", "/drive/v3/files") == 1
    # One token exchange serves every Drive call.
    assert len(fake.token_requests) == 1


def test_get_or_create_folder_search_filters_by_parent_and_type() -> None:
    fake = FakeGoogleWorkspace()
    fake.folders.append({"id": "other-parent", "name": "Reports", "mimeType": FOLDER_MIME, "parents": ["elsewhere"]})
    resolver = _resolver(fake)

    folder_id = asyncio.run(resolver.get_or_create_folder("Reports", "root"))

    assert folder_id != "other-parent"
    search = next(r for r in fake.requests if r.method == "GET" and r.url.path == "/drive/v3/files")
    query = search.url.params["q"]
    assert "name = 'Reports'" in query
    assert "'root' in parents" in query
    assert f"mimeType = '{FOLDER_MIME}'" in query
    assert "trashed = false" in query


def test_get_or_create_folder_returns_first_existing_match() -> None:
    fake = FakeGoogleWorkspace()
    fake.folders.extend(
        [
            {"id": "older", "name": "Reports", "mimeType": FOLDER_MIME, "parents": ["root"]},
            {"id": "newer", "name": "Reports", "mimeType": FOLDER_MIME, "parents": ["root"]},
        ]
    )
    resolver = _resolver(fake)

    assert asyncio.run(resolver.get_or_create_folder("Reports", "root")) == "older"
    assert fake.count("POST", "/drive/v3/files") == 0


def test_folder_names_with_quotes_are_escaped() -> None:
    assert escape_query_value("Rudi's photos") == "Rudi\\'s photos"
    assert escape_query_value("a\\b") == "a\\\\b"

    fake = FakeGoogleWorkspace()
    resolver = _resolver(fake)

    async def _run():
        first = await resolver.get_or_create_folder("Rudi's photos", "root")
        second = await resolver.get_or_create_folder("Rudi's photos", "root")
        return first, second

    first, second = asyncio.run(_run())
    assert first == second


def test_resolve_folder_path_creates_nested_segments() -> None:
    fake = FakeGoogleWorkspace()
    resolver = _resolver(fake)

    leaf = asyncio.run(resolver.resolve_folder_path("2024/INC-1/odo_awal", "root"))

    assert [folder["name"] for folder in fake.folders] == ["2024", "INC-1", "odo_awal"]
    assert fake.folders[1]["parents"] == [fake.folders[0]["id"]]
    assert leaf == fake.folders[2]["id"]


def test_get_or_create_folder_rejects_blank_name() -> None:
    resolver = _resolver(FakeGoogleWorkspace())
    with pytest.raises(ValueError):
        asyncio.run(resolver.get_or_create_folder("  ", "root"))


def test_search_failure_raises_drive_error_with_status_and_body() -> None:
    fake = FakeGoogleWorkspace()
    fake.fail_next = (403, '{"error": {"message": "insufficientFilePermissions"}}')
    resolver = _resolver(fake)

    with pytest.raises(DriveError) as excinfo:
        asyncio.run(resolver.get_or_create_folder("Reports", "root"))

    assert excinfo.value.status == 403
    assert "insufficientFilePermissions" in excinfo.value.body
    assert fake.folders == []


def test_shared_drive_created_once_with_request_id() -> None:
    fake = FakeGoogleWorkspace()
    resolver = _resolver(fake)

    async def _run():
        first = await resolver.get_or_create_shared_drive("SPPD Lembur", request_id="sppd-123")
        second = await resolver.get_or_create_shared_drive("SPPD Lembur")
        return first, second

    first, second = asyncio.run(_run())

    assert first == second
    assert len(fake.drives) == 1
    create = next(r for r in fake.requests if r.method == "POST" and r.url.path == "/drive/v3/drives")
    assert create.url.params["requestId"] == "sppd-123"


def test_shared_drive_generates_request_id_when_absent() -> None:
    fake = FakeGoogleWorkspace()
    resolver = _resolver(fake)

    asyncio.run(resolver.get_or_create_shared_drive("Archive"))

    create = next(r for r in fake.requests if r.method == "POST" and r.url.path == "/drive/v3/drives")
    assert create.url.params["requestId"].startswith("sppd-")


def test_list_children_returns_items() -> None:
    fake = FakeGoogleWorkspace()
    fake.folders.append({"id": "f1", "name": "Reports", "mimeType": FOLDER_MIME, "parents": ["root"]})
    fake.files.append(
        {
            "id": "x1",
            "name": "odo_awal_INC-1_a.jpg",
            "mimeType": "image/jpeg",
            "parents": ["root"],
            "webViewLink": "https://drive.google.com/file/d/x1/view",
        }
    )
    resolver = _resolver(fake)

    items = asyncio.run(resolver.list_children("root"))

    assert [item.id for item in items] == ["f1", "x1"]
    assert items[0].is_folder
    assert items[1].to_dict()["webViewLink"].startswith("https://drive.google.com")
