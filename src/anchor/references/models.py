"""Reference data models shared by the cache, views, and backend."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ReferenceType = Literal["folder", "file"]
ReferenceStatus = Literal["active", "paused", "idea", "completed", "archived"]

STATUS_ORDER: tuple[ReferenceStatus, ...] = (
    "active",
    "paused",
    "idea",
    "completed",
    "archived",
)

STATUS_LABELS: dict[str, str] = {
    "active": "Active",
    "paused": "Paused",
    "idea": "Idea",
    "completed": "Completed",
    "archived": "Archived",
}


class AnchorBaseModel(BaseModel):
    """Shared configuration for models that travel over the camelCase schema."""

    model_config = ConfigDict(populate_by_name=True)


class ReferenceDraft(AnchorBaseModel):
    """Client-authored fields of a reference.

    Attributes:
        reference_name: User-defined display name.
        absolute_path: Absolute path to the folder or file.
        type: Whether the path points at a folder or a file.
        status: Lifecycle status used for grouping.
        tags: Ordered tags; duplicates are kept as entered.
        description: Optional free-form notes.
        pinned: Whether the reference is hoisted to the pinned section.
    """

    reference_name: str = Field(alias="referenceName")
    absolute_path: str = Field(alias="absolutePath")
    type: ReferenceType = "folder"
    status: ReferenceStatus = "active"
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    pinned: bool = False


class Reference(ReferenceDraft):
    """Canonical reference as returned by the backend.

    Attributes:
        id: Backend-assigned identifier; immutable.
        created_at: Creation instant set once by the backend.
        last_opened_at: Instant of the most recent open action.
    """

    id: str
    created_at: datetime = Field(alias="createdAt")
    last_opened_at: datetime = Field(alias="lastOpenedAt")

    @field_validator("created_at", "last_opened_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_draft(self) -> ReferenceDraft:
        """Return the client-editable portion of this reference."""
        return ReferenceDraft.model_validate(
            self.model_dump(exclude={"id", "created_at", "last_opened_at"})
        )


class StorageFile(AnchorBaseModel):
    """Root structure of the persisted ``data.json`` document."""

    references: List[Reference] = Field(default_factory=list)


__all__ = [
    "AnchorBaseModel",
    "Reference",
    "ReferenceDraft",
    "ReferenceStatus",
    "ReferenceType",
    "STATUS_LABELS",
    "STATUS_ORDER",
    "StorageFile",
]
