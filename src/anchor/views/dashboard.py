"""Dashboard table state: sort controls over the grouped reference set."""

from __future__ import annotations

from anchor.store import ReferenceStore

from .pipeline import SORT_FIELDS, SortDirection, StatusGroup, group_for_dashboard


class DashboardView:
    """Sorted, status-grouped view of the store for the management table."""

    def __init__(
        self,
        store: ReferenceStore,
        *,
        sort_field: str = "createdAt",
        sort_direction: SortDirection = "desc",
    ) -> None:
        if sort_field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {sort_field!r}")
        self._store = store
        self.sort_field = sort_field
        self.sort_direction: SortDirection = sort_direction
        self.search_query = ""

    def toggle_sort(self, field: str) -> None:
        """Flip direction when re-selecting the current field; start new fields ascending."""
        if field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {field!r}")
        if field == self.sort_field:
            self.sort_direction = "asc" if self.sort_direction == "desc" else "desc"
        else:
            self.sort_field = field
            self.sort_direction = "asc"

    def groups(self) -> list[StatusGroup]:
        return group_for_dashboard(
            self._store.references,
            self.search_query,
            self.sort_field,
            self.sort_direction,
        )

    @property
    def is_empty(self) -> bool:
        return not self._store.references

    @property
    def show_spinner(self) -> bool:
        """True while loading with nothing cached yet to display."""
        snapshot = self._store.snapshot
        return snapshot.is_loading and not snapshot.references

    def count_label(self) -> str:
        total = len(self._store.references)
        return f"{total} {'reference' if total == 1 else 'references'}"


__all__ = ["DashboardView"]
