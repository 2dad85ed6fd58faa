"""Derived-view pipeline tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from anchor.references import Reference
from anchor.views import (
    HeaderRow,
    ItemRow,
    filter_references,
    flatten_sections,
    group_for_dashboard,
    group_for_quick_access,
    navigable_references,
    sort_references,
)
from anchor.views.pipeline import compare_references

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _reference(reference_id: str, *, day: int = 0, **overrides) -> Reference:
    values = {
        "id": reference_id,
        "reference_name": reference_id,
        "absolute_path": f"/work/{reference_id}",
        "created_at": BASE + timedelta(days=day),
        "last_opened_at": BASE + timedelta(days=day),
    }
    values.update(overrides)
    return Reference(**values)


def _ids(references) -> list[str]:
    return [reference.id for reference in references]


def test_filter_matches_name_or_tag_case_insensitively() -> None:
    references = [
        _reference("Anchor", tags=["Rust"]),
        _reference("Notes", tags=["writing"]),
        _reference("Site", tags=["web", "rustacean"]),
    ]

    assert _ids(filter_references(references, "RUST")) == ["Anchor", "Site"]
    assert _ids(filter_references(references, "not")) == ["Notes"]
    assert _ids(filter_references(references, "")) == ["Anchor", "Notes", "Site"]


def test_sort_by_created_at_descending() -> None:
    references = [_reference("a", day=1), _reference("b", day=3), _reference("c", day=2)]

    assert _ids(sort_references(references, "createdAt", "desc")) == ["b", "c", "a"]
    assert _ids(sort_references(references, "createdAt", "asc")) == ["a", "c", "b"]


def test_sort_is_stable_for_equal_keys() -> None:
    references = [
        _reference("first", reference_name="Same"),
        _reference("second", reference_name="same"),
        _reference("third", reference_name="SAME"),
    ]

    assert _ids(sort_references(references, "referenceName", "asc")) == ["first", "second", "third"]
    assert _ids(sort_references(references, "referenceName", "desc")) == [
        "first",
        "second",
        "third",
    ]


def test_compare_pinned_puts_pinned_first() -> None:
    pinned = _reference("p", pinned=True)
    plain = _reference("q")

    assert compare_references(pinned, plain, "pinned") < 0
    assert compare_references(plain, pinned, "pinned") > 0


def test_compare_tags_and_missing_description_as_text() -> None:
    left = _reference("l", tags=["b", "a"], description=None)
    right = _reference("r", tags=["a", "z"], description="notes")

    assert compare_references(left, right, "tags") > 0
    assert compare_references(left, right, "description") < 0


def test_sort_rejects_unknown_field_and_direction() -> None:
    with pytest.raises(ValueError):
        sort_references([], "color")
    with pytest.raises(ValueError):
        sort_references([], "createdAt", "sideways")  # type: ignore[arg-type]


def test_dashboard_groups_cover_every_match_in_status_order() -> None:
    references = [
        _reference("a", status="archived"),
        _reference("b", status="active"),
        _reference("c", status="idea"),
        _reference("d", status="active"),
    ]

    groups = group_for_dashboard(references)

    assert [group.status for group in groups] == ["active", "idea", "archived"]
    assert [group.label for group in groups] == ["Active", "Idea", "Archived"]
    grouped = [reference for group in groups for reference in group.references]
    assert sorted(_ids(grouped)) == ["a", "b", "c", "d"]
    assert all(reference.status == group.status for group in groups for reference in group.references)


def test_dashboard_floats_pinned_within_group_keeping_sort_order() -> None:
    references = [
        _reference("old", day=1),
        _reference("pinned-old", day=2, pinned=True),
        _reference("new", day=4),
        _reference("pinned-new", day=3, pinned=True),
    ]

    (group,) = group_for_dashboard(references, sort_field="createdAt", sort_direction="desc")

    assert _ids(group.references) == ["pinned-new", "pinned-old", "new", "old"]


def test_dashboard_omits_empty_groups_after_filtering() -> None:
    references = [_reference("Anchor", status="paused"), _reference("Other", status="active")]

    groups = group_for_dashboard(references, query="anch")

    assert [group.status for group in groups] == ["paused"]


def test_quick_access_hoists_pinned_into_own_section() -> None:
    references = [
        _reference("a", status="idea"),
        _reference("b", pinned=True, status="archived"),
        _reference("c", status="active"),
        _reference("d", pinned=True),
    ]

    sections = group_for_quick_access(references)

    assert _ids(sections.pinned) == ["b", "d"]
    assert [group.status for group in sections.groups] == ["active", "idea"]
    assert not sections.is_empty


def test_flatten_interleaves_headers_and_navigation_skips_them() -> None:
    references = [_reference("a", status="idea"), _reference("b", pinned=True), _reference("c")]

    rows = flatten_sections(group_for_quick_access(references))

    assert rows == [
        HeaderRow("Pinned"),
        ItemRow(references[1]),
        HeaderRow("Active"),
        ItemRow(references[2]),
        HeaderRow("Idea"),
        ItemRow(references[0]),
    ]
    assert _ids(navigable_references(rows)) == ["b", "c", "a"]


def test_quick_access_empty_when_nothing_matches() -> None:
    sections = group_for_quick_access([_reference("a")], "zzz")

    assert sections.is_empty
    assert flatten_sections(sections) == []
