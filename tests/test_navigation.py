"""Keyboard navigation tests."""

from __future__ import annotations

from datetime import datetime, timezone

from anchor.references import Reference
from anchor.views import Navigator

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _items(count: int) -> list[Reference]:
    return [
        Reference(
            id=f"r{index}",
            reference_name=f"Ref {index}",
            absolute_path=f"/r/{index}",
            created_at=NOW,
            last_opened_at=NOW,
        )
        for index in range(count)
    ]


def test_moves_clamp_at_both_ends() -> None:
    items = _items(3)
    navigator = Navigator()

    for _ in range(5):
        navigator.press("ArrowDown", items=items)
    assert navigator.selected_index == 2

    for _ in range(5):
        navigator.press("ArrowUp", items=items)
    assert navigator.selected_index == 0


def test_moves_on_empty_list_stay_at_zero() -> None:
    navigator = Navigator()

    navigator.press("ArrowDown")
    navigator.press("ArrowUp")

    assert navigator.selected_index == 0


def test_enter_on_empty_list_does_nothing() -> None:
    assert Navigator().press("Enter", items=[]) is None


def test_enter_modifiers_choose_open_target() -> None:
    items = _items(2)
    navigator = Navigator()
    navigator.press("ArrowDown", items=items)

    default = navigator.press("Enter", items=items)
    terminal = navigator.press("Enter", items=items, primary=True)
    editor = navigator.press("Enter", items=items, secondary=True)
    both = navigator.press("Enter", items=items, primary=True, secondary=True)

    assert default is not None and default.kind == "open_default"
    assert default.reference is items[1]
    assert terminal is not None and terminal.kind == "open_terminal"
    assert editor is not None and editor.kind == "open_editor"
    assert both is not None and both.kind == "open_terminal"


def test_escape_dismisses() -> None:
    action = Navigator().press("Escape")

    assert action is not None
    assert action.kind == "dismiss"
    assert action.reference is None


def test_shrinking_list_clamps_cursor() -> None:
    navigator = Navigator()
    items = _items(5)
    for _ in range(4):
        navigator.press("ArrowDown", items=items)

    navigator.sync(2)

    assert navigator.selected_index == 1


def test_tab_cycles_focus_ring_both_ways() -> None:
    navigator = Navigator()

    navigator.press("Tab")
    assert navigator.focus == "primary_action"
    navigator.press("Tab")
    assert navigator.focus == "search"
    navigator.press("Tab", shift=True)
    assert navigator.focus == "primary_action"
