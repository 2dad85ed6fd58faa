"""Process-wide reference cache kept in sync with the backend."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace
from typing import Any

from anchor.references import Reference, ReferenceDraft

from .adapter import RemoteStoreAdapter
from .errors import StoreError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheSnapshot:
    """Immutable view of the cache state.

    Attributes:
        references: Current references in display-independent order.
        is_loading: True while a round trip started by the cache is pending.
        error: Message of the most recent failure, if any.
    """

    references: tuple[Reference, ...] = ()
    is_loading: bool = False
    error: str | None = None

    def find(self, reference_id: str) -> Reference | None:
        """Return the reference with ``reference_id`` or ``None``."""
        for reference in self.references:
            if reference.id == reference_id:
                return reference
        return None


class ReferenceStore:
    """Single-writer cache of every reference known to the backend.

    The store is constructed once per process and passed to the views that read
    it. Readers only ever see :attr:`snapshot`; each operation replaces the
    snapshot in one assignment once its round trip resolves, so partial writes
    are never visible.

    Results apply in completion order. With ``sequence_mutations`` enabled, a
    mutation response for an id is dropped when a newer mutation on the same id
    was issued after it.
    """

    def __init__(self, adapter: RemoteStoreAdapter, *, sequence_mutations: bool = False) -> None:
        self._adapter = adapter
        self._snapshot = CacheSnapshot()
        self._sequence_mutations = sequence_mutations
        self._tickets: dict[str, int] = {}
        self._ticket_counter = itertools.count(1)

    @property
    def snapshot(self) -> CacheSnapshot:
        """Return the current cache snapshot."""
        return self._snapshot

    @property
    def references(self) -> tuple[Reference, ...]:
        """Shortcut for ``snapshot.references``."""
        return self._snapshot.references

    @property
    def adapter(self) -> RemoteStoreAdapter:
        """Return the adapter used for backend round trips."""
        return self._adapter

    async def load_references(self) -> None:
        """Replace the cached references with the backend's full set.

        A failed load records the error and keeps the previous references.
        """
        self._begin()
        try:
            references = await self._adapter.load()
        except StoreError as exc:
            LOGGER.warning("Reference refresh failed: %s", exc.message)
            self._set(is_loading=False, error=exc.message)
            return
        self._set(references=tuple(references), is_loading=False)

    async def add_reference(self, draft: ReferenceDraft) -> Reference:
        """Create a reference and append the canonical object to the cache.

        Raises:
            StoreError: If the backend rejects the reference.
        """
        self._begin()
        try:
            created = await self._adapter.create(draft)
        except StoreError as exc:
            self._fail(exc)
            raise
        current = self._snapshot.references
        if any(reference.id == created.id for reference in current):
            # A refresh that landed first already holds the new entry.
            references = tuple(
                created if reference.id == created.id else reference for reference in current
            )
        else:
            references = current + (created,)
        self._set(references=references, is_loading=False)
        return created

    async def update_reference(self, reference_id: str, draft: ReferenceDraft) -> Reference:
        """Update a reference, replacing the cached entry in place.

        Raises:
            StoreError: If the backend rejects the update.
        """
        ticket = self._issue(reference_id)
        self._begin()
        try:
            updated = await self._adapter.update(reference_id, draft)
        except StoreError as exc:
            self._settle(reference_id, ticket)
            self._fail(exc)
            raise
        if self._settle(reference_id, ticket):
            LOGGER.info("Dropping superseded update for %s", reference_id)
            self._set(is_loading=False)
            return updated
        self._set(
            references=tuple(
                updated if reference.id == reference_id else reference
                for reference in self._snapshot.references
            ),
            is_loading=False,
        )
        return updated

    async def delete_reference(self, reference_id: str) -> None:
        """Delete a reference and drop it from the cache.

        Raises:
            StoreError: If the backend rejects the deletion.
        """
        ticket = self._issue(reference_id)
        self._begin()
        try:
            await self._adapter.delete(reference_id)
        except StoreError as exc:
            self._settle(reference_id, ticket)
            self._fail(exc)
            raise
        if self._settle(reference_id, ticket):
            LOGGER.info("Dropping superseded delete for %s", reference_id)
            self._set(is_loading=False)
            return
        self._set(
            references=tuple(
                reference for reference in self._snapshot.references if reference.id != reference_id
            ),
            is_loading=False,
        )

    def _begin(self) -> None:
        self._set(is_loading=True, error=None)

    def _fail(self, exc: StoreError) -> None:
        self._set(is_loading=False, error=exc.message)

    def _set(self, **changes: Any) -> None:
        self._snapshot = replace(self._snapshot, **changes)

    def _issue(self, reference_id: str) -> int | None:
        if not self._sequence_mutations:
            return None
        ticket = next(self._ticket_counter)
        self._tickets[reference_id] = ticket
        return ticket

    def _settle(self, reference_id: str, ticket: int | None) -> bool:
        """Return True when a newer mutation on the id has superseded ``ticket``.

        The id is forgotten once the response holding its latest ticket lands.
        """
        if ticket is None:
            return False
        if self._tickets.get(reference_id) != ticket:
            return True
        del self._tickets[reference_id]
        return False


__all__ = ["CacheSnapshot", "ReferenceStore"]
