"""Validation and normalization helpers for reference forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .models import ReferenceDraft

_REQUIRED_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("referenceName", "reference_name", "Reference name is required"),
    ("absolutePath", "absolute_path", "Absolute path is required"),
)


@dataclass(slots=True)
class ValidationResult:
    """Outcome of validating a candidate reference.

    Attributes:
        valid: True when no errors were found.
        errors: Mapping of wire field names to human-readable messages.
    """

    valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def validate_for_save(candidate: ReferenceDraft | Mapping[str, Any]) -> ValidationResult:
    """Check the required fields of a reference before it is submitted.

    Args:
        candidate: Draft model or mapping keyed by wire or attribute names.

    Returns:
        ValidationResult: Validity flag plus one error per missing field.
    """

    if isinstance(candidate, ReferenceDraft):
        values: Mapping[str, Any] = candidate.model_dump(by_alias=True)
    else:
        values = candidate

    errors: dict[str, str] = {}
    for alias, attribute, message in _REQUIRED_FIELDS:
        raw = values.get(alias, values.get(attribute))
        if not isinstance(raw, str) or not raw.strip():
            errors[alias] = message
    return ValidationResult(valid=not errors, errors=errors)


def normalize_tags(raw_csv: str) -> list[str]:
    """Split comma-separated tag text into an ordered list.

    Args:
        raw_csv: Tag text as typed by the user.

    Returns:
        list[str]: Trimmed, non-empty tags in their original order.
    """

    return [tag.strip() for tag in raw_csv.split(",") if tag.strip()]


__all__ = ["ValidationResult", "validate_for_save", "normalize_tags"]
