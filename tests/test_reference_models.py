"""Reference model, validation, and wire mapping tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from anchor.references import (
    Reference,
    ReferenceDraft,
    draft_from_wire,
    normalize_tags,
    reference_from_wire,
    to_wire_payload,
    validate_for_save,
)
from anchor.references.wire import WIRE_TYPE_FIELD


def _draft(**overrides) -> ReferenceDraft:
    values = {"reference_name": "Anchor", "absolute_path": "/Users/me/anchor"}
    values.update(overrides)
    return ReferenceDraft(**values)


def test_validate_for_save_accepts_complete_draft() -> None:
    result = validate_for_save(_draft())

    assert result.valid
    assert result.errors == {}


def test_validate_for_save_reports_each_missing_field() -> None:
    result = validate_for_save({"referenceName": "   ", "absolutePath": ""})

    assert not result.valid
    assert result.errors == {
        "referenceName": "Reference name is required",
        "absolutePath": "Absolute path is required",
    }


def test_validate_for_save_accepts_attribute_names() -> None:
    result = validate_for_save({"reference_name": "Notes", "absolute_path": "/tmp/notes"})

    assert result.valid


def test_normalize_tags_trims_and_drops_empty_entries() -> None:
    assert normalize_tags(" rust,  , tauri ,rust") == ["rust", "tauri", "rust"]
    assert normalize_tags("") == []


def test_to_wire_payload_uses_reference_type_and_placeholders() -> None:
    payload = to_wire_payload(_draft(type="file", tags=["a"]))

    assert payload[WIRE_TYPE_FIELD] == "file"
    assert "type" not in payload
    assert payload["id"] == ""
    assert payload["createdAt"] == ""
    assert payload["lastOpenedAt"] == ""
    assert payload["referenceName"] == "Anchor"
    assert payload["tags"] == ["a"]


def test_to_wire_payload_carries_update_id() -> None:
    payload = to_wire_payload(_draft(), "abc-123")

    assert payload["id"] == "abc-123"


def test_draft_from_wire_restores_type() -> None:
    draft = draft_from_wire(to_wire_payload(_draft(type="file", pinned=True)))

    assert draft.type == "file"
    assert draft.pinned is True


def test_reference_from_wire_parses_canonical_object() -> None:
    reference = reference_from_wire(
        {
            "id": "r1",
            "referenceName": "Anchor",
            "absolutePath": "/a",
            "type": "folder",
            "status": "paused",
            "tags": [],
            "description": None,
            "createdAt": "2024-01-01T00:00:00Z",
            "lastOpenedAt": "2024-01-02T00:00:00",
            "pinned": False,
        }
    )

    assert reference.status == "paused"
    assert reference.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    # Naive timestamps are read as UTC.
    assert reference.last_opened_at.tzinfo is not None


def test_reference_rejects_unknown_status() -> None:
    with pytest.raises(ValidationError):
        Reference(
            id="r1",
            reference_name="x",
            absolute_path="/x",
            status="someday",
            created_at=datetime.now(timezone.utc),
            last_opened_at=datetime.now(timezone.utc),
        )


def test_to_draft_drops_backend_fields() -> None:
    now = datetime.now(timezone.utc)
    reference = Reference(id="r1", created_at=now, last_opened_at=now, **_draft().model_dump())

    draft = reference.to_draft()

    assert not hasattr(draft, "id")
    assert draft.reference_name == "Anchor"
