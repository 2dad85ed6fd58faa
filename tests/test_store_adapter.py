"""Remote store adapter tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from anchor.backend import BackendError
from anchor.references import ReferenceDraft
from anchor.store import RemoteStoreAdapter, StoreError

CANONICAL = {
    "id": "r1",
    "referenceName": "Anchor",
    "absolutePath": "/work/anchor",
    "type": "folder",
    "status": "active",
    "tags": ["rust", "tauri"],
    "description": None,
    "createdAt": "2024-01-01T00:00:00Z",
    "lastOpenedAt": "2024-01-01T00:00:00Z",
    "pinned": False,
}


def _adapter(**behaviour) -> tuple[RemoteStoreAdapter, AsyncMock]:
    backend = AsyncMock()
    backend.invoke = AsyncMock(**behaviour)
    return RemoteStoreAdapter(backend), backend.invoke


@pytest.mark.asyncio
async def test_load_parses_backend_order() -> None:
    second = dict(CANONICAL, id="r2")
    adapter, invoke = _adapter(return_value=[CANONICAL, second])

    references = await adapter.load()

    invoke.assert_awaited_once_with("get_references")
    assert [reference.id for reference in references] == ["r1", "r2"]


@pytest.mark.asyncio
async def test_create_sends_wire_payload() -> None:
    adapter, invoke = _adapter(return_value=CANONICAL)
    draft = ReferenceDraft(
        reference_name="Anchor",
        absolute_path="/work/anchor",
        tags=["rust", "tauri"],
    )

    created = await adapter.create(draft)

    command, = invoke.await_args.args
    payload = invoke.await_args.kwargs["reference"]
    assert command == "add_reference"
    assert payload["reference_type"] == "folder"
    assert payload["id"] == ""
    assert created.id == "r1"
    assert created.type == "folder"


@pytest.mark.asyncio
async def test_update_passes_id_twice() -> None:
    adapter, invoke = _adapter(return_value=CANONICAL)

    await adapter.update("r1", ReferenceDraft(reference_name="A", absolute_path="/a"))

    kwargs = invoke.await_args.kwargs
    assert kwargs["id"] == "r1"
    assert kwargs["reference"]["id"] == "r1"


@pytest.mark.asyncio
async def test_backend_error_message_is_kept() -> None:
    adapter, _ = _adapter(side_effect=BackendError("Reference not found: r9"))

    with pytest.raises(StoreError) as excinfo:
        await adapter.delete("r9")

    assert excinfo.value.message == "Reference not found: r9"


@pytest.mark.asyncio
async def test_unexpected_error_uses_fallback_message() -> None:
    adapter, _ = _adapter(side_effect=RuntimeError("boom"))

    with pytest.raises(StoreError) as excinfo:
        await adapter.load()

    assert excinfo.value.message == "Failed to load references"


@pytest.mark.asyncio
async def test_malformed_response_becomes_store_error() -> None:
    adapter, _ = _adapter(return_value={"id": "r1"})

    with pytest.raises(StoreError, match="Failed to add reference"):
        await adapter.create(ReferenceDraft(reference_name="A", absolute_path="/a"))


@pytest.mark.asyncio
async def test_path_exists_returns_bool() -> None:
    adapter, invoke = _adapter(return_value=True)

    assert await adapter.path_exists("/tmp") is True
    invoke.assert_awaited_once_with("path_exists", path="/tmp")
