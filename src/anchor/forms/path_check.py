"""Debounced, advisory path existence check for reference forms."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from anchor.store import RemoteStoreAdapter, StoreError

LOGGER = logging.getLogger(__name__)

MISSING_PATH_WARNING = "Warning: Path does not exist. You can still save this reference."
DEFAULT_DELAY_SECONDS = 0.5


class PathCheckAssistant:
    """Warn, without blocking, when an edited path does not exist.

    Each edit cancels the pending timer and schedules a new one, so only the most
    recent edit can fire. A check that is already talking to the backend when a
    newer edit arrives finishes, but its result is discarded.
    """

    def __init__(
        self,
        adapter: RemoteStoreAdapter,
        *,
        delay: float = DEFAULT_DELAY_SECONDS,
    ) -> None:
        self._adapter = adapter
        self._delay = delay
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._generation = 0
        self.warning: Optional[str] = None
        self.is_checking = False

    @property
    def delay(self) -> float:
        return self._delay

    def on_path_edited(self, value: str) -> None:
        """Record a path edit; must be called from the running event loop."""
        self.cancel()
        path = value.strip()
        if not path:
            self.warning = None
            return
        self.is_checking = True
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire, path, self._generation)

    def cancel(self) -> None:
        """Cancel the pending timer and invalidate any in-flight check."""
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.is_checking = False

    async def wait_idle(self) -> None:
        """Wait until the pending timer has fired and its check has completed."""
        while self._timer is not None or (self._task is not None and not self._task.done()):
            if self._task is not None and not self._task.done():
                await self._task
            else:
                await asyncio.sleep(self._delay / 4 or 0.01)

    def _fire(self, path: str, generation: int) -> None:
        self._timer = None
        self._task = asyncio.ensure_future(self._check(path, generation))

    async def _check(self, path: str, generation: int) -> None:
        try:
            exists = await self._adapter.path_exists(path)
        except StoreError as exc:
            LOGGER.debug("Path check for %s failed: %s", path, exc.message)
            exists = True
        if generation != self._generation:
            return
        self.warning = None if exists else MISSING_PATH_WARNING
        self.is_checking = False


__all__ = ["DEFAULT_DELAY_SECONDS", "MISSING_PATH_WARNING", "PathCheckAssistant"]
