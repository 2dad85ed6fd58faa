"""Add/edit form state for a single reference."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from anchor.references import (
    Reference,
    ReferenceDraft,
    ReferenceStatus,
    ReferenceType,
    normalize_tags,
    validate_for_save,
)
from anchor.store import ReferenceStore, StoreError

from .path_check import PathCheckAssistant

LOGGER = logging.getLogger(__name__)

FormMode = Literal["add", "edit"]

_FIELD_ALIASES = {
    "reference_name": "referenceName",
    "absolute_path": "absolutePath",
}


@dataclass(slots=True)
class FormFields:
    """Raw form inputs; tags are kept as the comma-separated text being typed."""

    reference_name: str = ""
    absolute_path: str = ""
    type: ReferenceType = "folder"
    status: ReferenceStatus = "active"
    tags_text: str = ""
    description: str = ""
    pinned: bool = False

    @classmethod
    def from_reference(cls, reference: Reference) -> "FormFields":
        return cls(
            reference_name=reference.reference_name,
            absolute_path=reference.absolute_path,
            type=reference.type,
            status=reference.status,
            tags_text=", ".join(reference.tags),
            description=reference.description or "",
            pinned=reference.pinned,
        )

    def to_draft(self) -> ReferenceDraft:
        """Build a trimmed draft with normalized tags and an optional description."""
        return ReferenceDraft(
            reference_name=self.reference_name.strip(),
            absolute_path=self.absolute_path.strip(),
            type=self.type,
            status=self.status,
            tags=normalize_tags(self.tags_text),
            description=self.description.strip() or None,
            pinned=self.pinned,
        )


class ReferenceFormSession:
    """Drive one add or edit form from first keystroke to a saved reference.

    Validation failures and backend failures both keep the form open; only a
    successful save closes it. The path assistant's warning never blocks saving.
    """

    def __init__(
        self,
        store: ReferenceStore,
        path_checker: PathCheckAssistant,
        *,
        mode: FormMode = "add",
        reference: Optional[Reference] = None,
    ) -> None:
        if mode == "edit" and reference is None:
            raise ValueError("Edit forms require the reference being edited.")
        self._store = store
        self._path_checker = path_checker
        self.mode: FormMode = mode
        self.reference_id = reference.id if reference is not None else None
        self.fields = FormFields.from_reference(reference) if reference else FormFields()
        self.validation_errors: dict[str, str] = {}
        self.submit_error: Optional[str] = None
        self.is_submitting = False
        self.is_open = True

    @property
    def path_checker(self) -> PathCheckAssistant:
        return self._path_checker

    @property
    def path_warning(self) -> Optional[str]:
        if "absolutePath" in self.validation_errors:
            return None
        return self._path_checker.warning

    def set_field(self, name: str, value: object) -> None:
        """Assign a form field, clearing its validation error."""
        if not hasattr(self.fields, name):
            raise AttributeError(f"Unknown form field: {name}")
        setattr(self.fields, name, value)
        self.validation_errors.pop(_FIELD_ALIASES.get(name, name), None)
        if name == "absolute_path":
            self._path_checker.on_path_edited(str(value))

    def validate(self) -> bool:
        result = validate_for_save(
            {
                "referenceName": self.fields.reference_name,
                "absolutePath": self.fields.absolute_path,
            }
        )
        self.validation_errors = dict(result.errors)
        return result.valid

    async def submit(self) -> Optional[Reference]:
        """Validate and save; return the canonical reference or ``None`` on failure."""
        if not self.validate():
            return None
        draft = self.fields.to_draft()
        self.is_submitting = True
        self.submit_error = None
        try:
            if self.mode == "edit" and self.reference_id is not None:
                saved = await self._store.update_reference(self.reference_id, draft)
            else:
                saved = await self._store.add_reference(draft)
        except StoreError as exc:
            LOGGER.info("Saving reference failed: %s", exc.message)
            self.submit_error = exc.message
            return None
        finally:
            self.is_submitting = False
        self._path_checker.cancel()
        self.is_open = False
        return saved

    def cancel(self) -> bool:
        """Close the form unless a save is in flight; return whether it closed."""
        if self.is_submitting:
            return False
        self._path_checker.cancel()
        self.submit_error = None
        self.is_open = False
        return True


__all__ = ["FormFields", "FormMode", "ReferenceFormSession"]
