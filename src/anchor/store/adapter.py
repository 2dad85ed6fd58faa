"""Typed request/response boundary to the backend command interface."""

from __future__ import annotations

import logging
from typing import Any

from anchor.backend import BackendError, CommandBackend
from anchor.references import Reference, ReferenceDraft, reference_from_wire, to_wire_payload

from .errors import StoreError

LOGGER = logging.getLogger(__name__)


class RemoteStoreAdapter:
    """Expose the reference commands of a backend as typed coroutines."""

    def __init__(self, backend: CommandBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> CommandBackend:
        """Return the backend this adapter talks to."""
        return self._backend

    async def load(self) -> list[Reference]:
        """Fetch the full reference set in backend order."""
        result = await self._call("get_references", "Failed to load references")
        try:
            return [reference_from_wire(item) for item in result or []]
        except (TypeError, ValueError) as exc:
            raise StoreError("Failed to load references") from exc

    async def create(self, draft: ReferenceDraft) -> Reference:
        """Create a reference; the backend assigns id and timestamps."""
        result = await self._call(
            "add_reference",
            "Failed to add reference",
            reference=to_wire_payload(draft),
        )
        return self._parse(result, "Failed to add reference")

    async def update(self, reference_id: str, draft: ReferenceDraft) -> Reference:
        """Replace the editable fields of ``reference_id``."""
        result = await self._call(
            "update_reference",
            "Failed to update reference",
            id=reference_id,
            reference=to_wire_payload(draft, reference_id),
        )
        return self._parse(result, "Failed to update reference")

    async def delete(self, reference_id: str) -> None:
        """Delete ``reference_id``; unknown ids fail."""
        await self._call("delete_reference", "Failed to delete reference", id=reference_id)

    async def path_exists(self, path: str) -> bool:
        """Ask the backend whether ``path`` exists on disk (advisory only)."""
        result = await self._call("path_exists", "Failed to check path", path=path)
        return bool(result)

    async def _call(self, command: str, fallback: str, **arguments: Any) -> Any:
        try:
            return await self._backend.invoke(command, **arguments)
        except BackendError as exc:
            LOGGER.debug("Backend command %s failed: %s", command, exc.message)
            raise StoreError(exc.message or fallback) from exc
        except Exception as exc:
            LOGGER.debug("Backend command %s raised %r", command, exc)
            raise StoreError(fallback) from exc

    @staticmethod
    def _parse(result: Any, fallback: str) -> Reference:
        try:
            return reference_from_wire(result)
        except (TypeError, ValueError) as exc:
            raise StoreError(fallback) from exc


__all__ = ["RemoteStoreAdapter"]
