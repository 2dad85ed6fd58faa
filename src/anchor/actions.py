"""Fire-and-forget shell and window actions on references."""

from __future__ import annotations

import logging
from typing import Any

from anchor.backend import CommandBackend

LOGGER = logging.getLogger(__name__)


class ReferenceActions:
    """Invoke open/reveal/copy/window commands, swallowing any failure."""

    def __init__(self, backend: CommandBackend) -> None:
        self._backend = backend

    async def open_in_finder(self, path: str) -> bool:
        return await self._perform("open_in_finder", path=path)

    async def open_in_terminal(self, path: str) -> bool:
        return await self._perform("open_in_terminal", path=path)

    async def open_in_editor(self, path: str) -> bool:
        return await self._perform("open_in_vscode", path=path)

    async def reveal_in_finder(self, path: str) -> bool:
        return await self._perform("reveal_in_finder", path=path)

    async def copy_path(self, path: str) -> bool:
        return await self._perform("copy_path_to_clipboard", path=path)

    async def show_dashboard(self) -> bool:
        return await self._perform("show_dashboard")

    async def hide_popover(self) -> bool:
        return await self._perform("hide_popover")

    async def _perform(self, command: str, **arguments: Any) -> bool:
        """Run ``command`` and report whether it succeeded."""
        try:
            await self._backend.invoke(command, **arguments)
        except Exception as exc:
            LOGGER.debug("Ignoring failed %s: %s", command, exc)
            return False
        return True


__all__ = ["ReferenceActions"]
