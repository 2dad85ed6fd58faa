"""Mapping between in-memory reference models and the backend wire schema.

The backend command interface expects the reference type under
``reference_type`` in create/update payloads while canonical objects come
back with ``type``. Every translation between the two shapes goes through
this module.
"""

from __future__ import annotations

from typing import Any, Mapping

from .models import Reference, ReferenceDraft

WIRE_TYPE_FIELD = "reference_type"


def to_wire_payload(draft: ReferenceDraft, reference_id: str = "") -> dict[str, Any]:
    """Build the outbound create/update payload for ``draft``.

    Args:
        draft: Client-authored reference fields.
        reference_id: Identifier for updates; empty for creation.

    Returns:
        dict[str, Any]: Payload with placeholder timestamps.
    """

    return {
        "id": reference_id,
        "referenceName": draft.reference_name,
        "absolutePath": draft.absolute_path,
        WIRE_TYPE_FIELD: draft.type,
        "status": draft.status,
        "tags": list(draft.tags),
        "description": draft.description,
        "createdAt": "",
        "lastOpenedAt": "",
        "pinned": draft.pinned,
    }


def draft_from_wire(payload: Mapping[str, Any]) -> ReferenceDraft:
    """Recover the draft carried by an outbound payload."""
    data = {
        key: value
        for key, value in payload.items()
        if key not in {"id", "createdAt", "lastOpenedAt", WIRE_TYPE_FIELD}
    }
    if WIRE_TYPE_FIELD in payload:
        data["type"] = payload[WIRE_TYPE_FIELD]
    return ReferenceDraft.model_validate(data)


def reference_from_wire(data: Mapping[str, Any] | Reference) -> Reference:
    """Parse a canonical reference returned by the backend."""
    if isinstance(data, Reference):
        return data
    values = dict(data)
    if "type" not in values and WIRE_TYPE_FIELD in values:
        values["type"] = values.pop(WIRE_TYPE_FIELD)
    return Reference.model_validate(values)


__all__ = ["WIRE_TYPE_FIELD", "to_wire_payload", "draft_from_wire", "reference_from_wire"]
