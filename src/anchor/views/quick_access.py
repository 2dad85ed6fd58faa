"""Quick-access panel: search, sections, and keyboard dispatch."""

from __future__ import annotations

import logging
from typing import Optional

from anchor.actions import ReferenceActions
from anchor.references import Reference
from anchor.store import ReferenceStore

from .navigation import NavigationAction, Navigator
from .pipeline import (
    QuickAccessSections,
    Row,
    flatten_sections,
    group_for_quick_access,
    navigable_references,
)

LOGGER = logging.getLogger(__name__)


class QuickAccessPanel:
    """Compact search-and-open panel over the reference store.

    Derived rows are recomputed from the store on every read, and the cursor is
    re-clamped against their length, so a refresh that shrinks the list never
    leaves the selection out of range.
    """

    def __init__(self, store: ReferenceStore, actions: ReferenceActions) -> None:
        self._store = store
        self._actions = actions
        self._navigator = Navigator()
        self._query = ""
        self.active_row_id: Optional[str] = None
        self.menu_open_id: Optional[str] = None

    @property
    def query(self) -> str:
        return self._query

    @property
    def navigator(self) -> Navigator:
        return self._navigator

    def set_query(self, query: str) -> None:
        """Update the search text and move the cursor back to the top."""
        self._query = query
        self._navigator.reset()

    def sections(self) -> QuickAccessSections:
        return group_for_quick_access(self._store.references, self._query)

    def rows(self) -> list[Row]:
        return flatten_sections(self.sections())

    def items(self) -> list[Reference]:
        items = navigable_references(self.rows())
        self._navigator.sync(len(items))
        return items

    @property
    def selected_index(self) -> int:
        self.items()
        return self._navigator.selected_index

    @property
    def selected_reference(self) -> Optional[Reference]:
        items = self.items()
        if not items:
            return None
        return items[self._navigator.selected_index]

    def hover(self, reference_id: Optional[str]) -> None:
        """Track the row under the pointer (``None`` when the pointer leaves)."""
        self.active_row_id = reference_id

    def is_open_control_visible(self, reference_id: str) -> bool:
        """Show a row's open control when hovered, selected without hover, or its menu is open."""
        if self.menu_open_id == reference_id or self.active_row_id == reference_id:
            return True
        selected = self.selected_reference
        return self.active_row_id is None and selected is not None and selected.id == reference_id

    async def handle_key(
        self,
        key: str,
        *,
        primary: bool = False,
        secondary: bool = False,
        shift: bool = False,
    ) -> Optional[NavigationAction]:
        """Apply a key press and dispatch whatever action it requests."""
        action = self._navigator.press(
            key,
            items=self.items(),
            primary=primary,
            secondary=secondary,
            shift=shift,
        )
        if action is not None:
            await self.dispatch(action)
        return action

    async def dispatch(self, action: NavigationAction) -> None:
        if action.kind == "dismiss":
            await self._actions.hide_popover()
            return
        if action.reference is None:
            return
        path = action.reference.absolute_path
        LOGGER.debug("Dispatching %s for %s", action.kind, path)
        if action.kind == "open_terminal":
            await self._actions.open_in_terminal(path)
        elif action.kind == "open_editor":
            await self._actions.open_in_editor(path)
        else:
            await self._actions.open_in_finder(path)

    async def open_dashboard(self) -> None:
        await self._actions.show_dashboard()


__all__ = ["QuickAccessPanel"]
