"""Reference entity model for Anchor."""

from .models import (
    STATUS_LABELS,
    STATUS_ORDER,
    Reference,
    ReferenceDraft,
    ReferenceStatus,
    ReferenceType,
    StorageFile,
)
from .validation import ValidationResult, normalize_tags, validate_for_save
from .wire import draft_from_wire, reference_from_wire, to_wire_payload

__all__ = [
    "Reference",
    "ReferenceDraft",
    "ReferenceStatus",
    "ReferenceType",
    "STATUS_LABELS",
    "STATUS_ORDER",
    "StorageFile",
    "ValidationResult",
    "validate_for_save",
    "normalize_tags",
    "to_wire_payload",
    "draft_from_wire",
    "reference_from_wire",
]
