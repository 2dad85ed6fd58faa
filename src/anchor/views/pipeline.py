"""Derived-view pipeline: filter, group, sort, and flatten references.

Every function here is pure. The dashboard and quick-access views both start
from :func:`filter_references` and differ only in how they group:

* the dashboard sorts the whole filtered set, splits it into status groups,
  and floats pinned entries to the top of each group;
* the quick-access panel hoists pinned entries into their own section and
  groups the rest by status without re-sorting.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, Literal, Sequence, Union

from anchor.references import STATUS_LABELS, STATUS_ORDER, Reference, ReferenceStatus

SortDirection = Literal["asc", "desc"]

SORT_FIELDS: dict[str, str] = {
    "id": "id",
    "referenceName": "reference_name",
    "absolutePath": "absolute_path",
    "type": "type",
    "status": "status",
    "tags": "tags",
    "description": "description",
    "createdAt": "created_at",
    "lastOpenedAt": "last_opened_at",
    "pinned": "pinned",
}
TIMESTAMP_FIELDS = frozenset({"createdAt", "lastOpenedAt"})
PINNED_LABEL = "Pinned"


@dataclass(frozen=True, slots=True)
class StatusGroup:
    """References sharing one status, in display order."""

    status: ReferenceStatus
    label: str
    references: tuple[Reference, ...]


@dataclass(frozen=True, slots=True)
class QuickAccessSections:
    """Quick-access grouping: pinned section first, then non-empty status groups."""

    pinned: tuple[Reference, ...]
    groups: tuple[StatusGroup, ...]

    @property
    def is_empty(self) -> bool:
        return not self.pinned and not self.groups


@dataclass(frozen=True, slots=True)
class HeaderRow:
    """Section header in a flattened row sequence."""

    label: str


@dataclass(frozen=True, slots=True)
class ItemRow:
    """Reference entry in a flattened row sequence."""

    reference: Reference


Row = Union[HeaderRow, ItemRow]


def matches_query(reference: Reference, query: str) -> bool:
    """Return True when ``query`` occurs in the name or any tag, ignoring case."""
    needle = query.lower()
    if needle in reference.reference_name.lower():
        return True
    return any(needle in tag.lower() for tag in reference.tags)


def filter_references(references: Iterable[Reference], query: str = "") -> list[Reference]:
    """Keep references matching ``query``; an empty query keeps everything."""
    return [reference for reference in references if matches_query(reference, query)]


def compare_references(left: Reference, right: Reference, field: str) -> int:
    """Three-way comparison of two references on a camelCase sort field.

    Raises:
        ValueError: If ``field`` is not a sortable field.
    """
    attribute = _attribute_for(field)
    if field in TIMESTAMP_FIELDS:
        left_value = getattr(left, attribute).timestamp()
        right_value = getattr(right, attribute).timestamp()
        return (left_value > right_value) - (left_value < right_value)
    if field == "pinned":
        if left.pinned == right.pinned:
            return 0
        return -1 if left.pinned else 1
    left_text = _string_value(getattr(left, attribute))
    right_text = _string_value(getattr(right, attribute))
    return (left_text > right_text) - (left_text < right_text)


def sort_references(
    references: Iterable[Reference],
    field: str = "createdAt",
    direction: SortDirection = "desc",
) -> list[Reference]:
    """Stable sort of ``references`` by ``field``; ``desc`` negates the comparison."""
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction!r}")
    _attribute_for(field)
    sign = 1 if direction == "asc" else -1

    def _compare(left: Reference, right: Reference) -> int:
        return sign * compare_references(left, right, field)

    return sorted(references, key=cmp_to_key(_compare))


def group_for_dashboard(
    references: Iterable[Reference],
    query: str = "",
    sort_field: str = "createdAt",
    sort_direction: SortDirection = "desc",
) -> list[StatusGroup]:
    """Sort the filtered set, split it by status, and float pinned entries per group."""
    ordered = sort_references(filter_references(references, query), sort_field, sort_direction)
    groups: list[StatusGroup] = []
    for status in STATUS_ORDER:
        members = [reference for reference in ordered if reference.status == status]
        if not members:
            continue
        members.sort(key=lambda reference: not reference.pinned)
        groups.append(StatusGroup(status, STATUS_LABELS[status], tuple(members)))
    return groups


def group_for_quick_access(references: Iterable[Reference], query: str = "") -> QuickAccessSections:
    """Hoist pinned matches into one section and group the rest by status."""
    matches = filter_references(references, query)
    pinned = tuple(reference for reference in matches if reference.pinned)
    groups = []
    for status in STATUS_ORDER:
        members = tuple(
            reference for reference in matches if not reference.pinned and reference.status == status
        )
        if members:
            groups.append(StatusGroup(status, STATUS_LABELS[status], members))
    return QuickAccessSections(pinned=pinned, groups=tuple(groups))


def flatten_sections(sections: QuickAccessSections) -> list[Row]:
    """Interleave section headers and entries in display order."""
    rows: list[Row] = []
    if sections.pinned:
        rows.append(HeaderRow(PINNED_LABEL))
        rows.extend(ItemRow(reference) for reference in sections.pinned)
    for group in sections.groups:
        rows.append(HeaderRow(group.label))
        rows.extend(ItemRow(reference) for reference in group.references)
    return rows


def navigable_references(rows: Sequence[Row]) -> list[Reference]:
    """Strip header rows, leaving the keyboard-navigation index space."""
    return [row.reference for row in rows if isinstance(row, ItemRow)]


def _attribute_for(field: str) -> str:
    try:
        return SORT_FIELDS[field]
    except KeyError:
        raise ValueError(f"Unknown sort field: {field!r}") from None


def _string_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value).lower()
    return str(value).lower()


__all__ = [
    "HeaderRow",
    "ItemRow",
    "PINNED_LABEL",
    "QuickAccessSections",
    "Row",
    "SORT_FIELDS",
    "SortDirection",
    "StatusGroup",
    "compare_references",
    "filter_references",
    "flatten_sections",
    "group_for_dashboard",
    "group_for_quick_access",
    "matches_query",
    "navigable_references",
    "sort_references",
]
