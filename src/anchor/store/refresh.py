"""Refresh triggers that keep the reference cache current."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from anchor.events import (
    REFERENCES_CHANGED,
    VISIBILITY_CHANGE,
    WINDOW_FOCUS,
    EventBus,
    Subscription,
)

from .cache import CacheSnapshot, ReferenceStore

LOGGER = logging.getLogger(__name__)


class RefreshController:
    """Reload the store on mount, focus, visibility, and backend notifications.

    ``start`` performs the initial load and subscribes; ``stop`` removes every
    subscription it created. The controller can also be used as an async context
    manager around a view's lifetime.
    """

    def __init__(
        self,
        store: ReferenceStore,
        bus: EventBus,
        *,
        on_refresh: Optional[Callable[[CacheSnapshot], None]] = None,
    ) -> None:
        self._store = store
        self._bus = bus
        self._on_refresh = on_refresh
        self._subscriptions: list[Subscription] = []

    @property
    def active(self) -> bool:
        """Return True while subscriptions are registered."""
        return bool(self._subscriptions)

    async def start(self) -> None:
        """Load references and subscribe to refresh events."""
        if self._subscriptions:
            return
        self._subscriptions = [
            self._bus.subscribe(WINDOW_FOCUS, self._on_focus),
            self._bus.subscribe(VISIBILITY_CHANGE, self._on_visibility),
            self._bus.subscribe(REFERENCES_CHANGED, self._on_references_changed),
        ]
        await self._reload()

    def stop(self) -> None:
        """Unsubscribe from every refresh event."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    async def __aenter__(self) -> "RefreshController":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.stop()

    async def _reload(self) -> None:
        await self._store.load_references()
        if self._on_refresh is not None:
            self._on_refresh(self._store.snapshot)

    async def _on_focus(self, _: Any) -> None:
        await self._reload()

    async def _on_visibility(self, visible: Any) -> None:
        if visible:
            await self._reload()

    async def _on_references_changed(self, _: Any) -> None:
        LOGGER.debug("Backend reported reference changes; reloading.")
        await self._reload()


__all__ = ["RefreshController"]
