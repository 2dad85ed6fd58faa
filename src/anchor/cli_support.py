"""Wiring shared by CLI commands: logging setup and the runtime object graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from anchor.actions import ReferenceActions
from anchor.backend import LocalBackend, ReferenceRepository
from anchor.config import AnchorConfig
from anchor.config.models import LoggingSettings
from anchor.events import EventBus
from anchor.forms import PathCheckAssistant
from anchor.store import ReferenceStore, RemoteStoreAdapter

LOG_FILENAME = "anchor.log"
_HANDLER_MARKER = "_anchor_handler"


def configure_logging(settings: LoggingSettings, data_dir: Path | None = None) -> None:
    """Install Anchor's console and rotating-file handlers on the ``anchor`` logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        settings: Logging configuration (level and rotation limits).
        data_dir: Directory for ``anchor.log``; the file handler is skipped when
            ``None`` or when the directory cannot be created.
    """

    logger = logging.getLogger("anchor")
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    console_handler = RichHandler(console=Console(stderr=True), show_path=False)
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if data_dir is None:
        return
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            data_dir / LOG_FILENAME,
            maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
            backupCount=max(0, settings.backup_count),
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("File logging disabled: %s", exc)
        return
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    setattr(file_handler, _HANDLER_MARKER, True)
    logger.addHandler(file_handler)


@dataclass(slots=True)
class AnchorRuntime:
    """Object graph for one process: backend, cache, and the services around it."""

    config: AnchorConfig
    bus: EventBus
    repository: ReferenceRepository
    backend: LocalBackend
    adapter: RemoteStoreAdapter
    store: ReferenceStore
    actions: ReferenceActions

    def path_checker(self) -> PathCheckAssistant:
        """Return a path assistant using the configured quiet period."""
        return PathCheckAssistant(
            self.adapter,
            delay=self.config.views.path_check_delay_ms / 1000,
        )


def build_runtime(config: AnchorConfig) -> AnchorRuntime:
    """Construct the runtime for ``config``; this is the cache's initialization point."""
    bus = EventBus()
    repository = ReferenceRepository(Path(config.storage.data_dir))
    backend = LocalBackend(repository, config.integrations, bus=bus)
    adapter = RemoteStoreAdapter(backend)
    store = ReferenceStore(adapter, sequence_mutations=config.store.sequence_mutations)
    return AnchorRuntime(
        config=config,
        bus=bus,
        repository=repository,
        backend=backend,
        adapter=adapter,
        store=store,
        actions=ReferenceActions(backend),
    )


__all__ = ["AnchorRuntime", "LOG_FILENAME", "build_runtime", "configure_logging"]
