"""Keyboard navigation over the quick-access index space."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from anchor.references import Reference

Key = Literal["ArrowDown", "ArrowUp", "Enter", "Escape", "Tab"]
ActionKind = Literal["open_default", "open_terminal", "open_editor", "dismiss"]
FocusTarget = Literal["search", "primary_action"]

FOCUS_RING: tuple[FocusTarget, ...] = ("search", "primary_action")


@dataclass(frozen=True, slots=True)
class NavigationAction:
    """Action requested by a key press.

    Attributes:
        kind: What to do.
        reference: Entry under the cursor; ``None`` for ``dismiss``.
    """

    kind: ActionKind
    reference: Optional[Reference] = None


class Navigator:
    """Cursor over ``count`` navigable entries plus the panel's focus ring.

    Every transition is total: out-of-range moves clamp, and actions on an empty
    list produce nothing.
    """

    def __init__(self, count: int = 0) -> None:
        self._count = max(0, count)
        self._index = 0
        self._focus: FocusTarget = "search"

    @property
    def selected_index(self) -> int:
        return self._index

    @property
    def count(self) -> int:
        return self._count

    @property
    def focus(self) -> FocusTarget:
        return self._focus

    def reset(self) -> None:
        """Move the cursor back to the first entry (query changed)."""
        self._index = 0

    def sync(self, count: int) -> None:
        """Adopt a new entry count and clamp the cursor into range."""
        self._count = max(0, count)
        self._index = min(self._index, max(self._count - 1, 0))

    def move_down(self) -> None:
        self._index = max(min(self._index + 1, self._count - 1), 0)

    def move_up(self) -> None:
        self._index = max(self._index - 1, 0)

    def cycle_focus(self, *, reverse: bool = False) -> FocusTarget:
        """Move focus to the next control in the ring and return it."""
        step = -1 if reverse else 1
        position = FOCUS_RING.index(self._focus)
        self._focus = FOCUS_RING[(position + step) % len(FOCUS_RING)]
        return self._focus

    def press(
        self,
        key: str,
        *,
        items: Sequence[Reference] = (),
        primary: bool = False,
        secondary: bool = False,
        shift: bool = False,
    ) -> Optional[NavigationAction]:
        """Apply ``key`` and return the action it requests, if any.

        Args:
            key: Key name such as ``ArrowDown`` or ``Enter``.
            items: Current navigable entries; the cursor is re-clamped against them.
            primary: Primary modifier held (Cmd on macOS); Enter opens a terminal.
            secondary: Secondary modifier held (Option/Alt); Enter opens the editor.
            shift: Shift held; reverses Tab focus cycling.

        Returns:
            Optional[NavigationAction]: Requested action, or ``None``.
        """
        self.sync(len(items))
        if key == "ArrowDown":
            self.move_down()
        elif key == "ArrowUp":
            self.move_up()
        elif key == "Enter":
            if not items:
                return None
            reference = items[self._index]
            if primary:
                return NavigationAction("open_terminal", reference)
            if secondary:
                return NavigationAction("open_editor", reference)
            return NavigationAction("open_default", reference)
        elif key == "Escape":
            return NavigationAction("dismiss")
        elif key == "Tab":
            self.cycle_focus(reverse=shift)
        return None


__all__ = ["ActionKind", "FOCUS_RING", "FocusTarget", "Key", "NavigationAction", "Navigator"]
