"""Watch the reference data file and publish change notifications."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from anchor.events import REFERENCES_CHANGED, EventBus

LOGGER = logging.getLogger(__name__)


class DataFileWatcher:
    """Emit ``references_changed`` on the bus when the data file changes on disk.

    Watchdog delivers events on its own thread; they are handed to the event loop
    with ``call_soon_threadsafe`` and coalesced there so a burst of writes yields
    a single notification after ``debounce_seconds`` of quiet.
    """

    def __init__(
        self,
        data_path: Path,
        bus: EventBus,
        *,
        debounce_seconds: float = 0.25,
    ) -> None:
        """Initialize the watcher.

        Args:
            data_path: Path of the reference document to watch.
            bus: Event bus receiving ``references_changed``.
            debounce_seconds: Quiet period before a notification is emitted.
        """

        self._data_path = data_path.expanduser()
        self._bus = bus
        self._debounce_seconds = max(0.0, debounce_seconds)
        self._observer: Optional[Observer] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Start observing the data directory; call from the running event loop.

        Raises:
            RuntimeError: If the watcher is already running.
        """

        if self._observer is not None:
            raise RuntimeError("DataFileWatcher is already running.")
        self._loop = asyncio.get_running_loop()
        directory = self._data_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        self._observer = Observer()
        self._observer.schedule(
            _DataFileEventHandler(self._data_path, self.notify_threadsafe),
            str(directory),
            recursive=False,
        )
        self._observer.start()
        LOGGER.debug("Watching %s for reference changes", self._data_path)

    def stop(self) -> None:
        """Stop the observer and drop any pending notification."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    def notify_threadsafe(self) -> None:
        """Schedule a notification from any thread."""
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._schedule)

    def _schedule(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        assert self._loop is not None
        self._pending = self._loop.call_later(self._debounce_seconds, self._emit)

    def _emit(self) -> None:
        self._pending = None
        self._bus.emit(REFERENCES_CHANGED)


class _DataFileEventHandler(FileSystemEventHandler):
    """Forward events that touch the data file."""

    def __init__(self, data_path: Path, notify: Callable[[], None]) -> None:
        super().__init__()
        self._data_path = data_path
        self._notify = notify

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def on_moved(self, event: FileSystemEvent) -> None:  # pragma: no cover - watchdog-specific
        self._forward(event, getattr(event, "dest_path", None))

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(event)

    def _forward(self, event: FileSystemEvent, dest_path: Optional[str] = None) -> None:
        if event.is_directory:
            return
        candidates = [Path(str(event.src_path))]
        if dest_path:
            candidates.append(Path(str(dest_path)))
        if any(candidate.name == self._data_path.name for candidate in candidates):
            self._notify()
