"""Named event subscriptions used to wire refresh triggers and window commands."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

LOGGER = logging.getLogger(__name__)

REFERENCES_CHANGED = "references_changed"
WINDOW_FOCUS = "window_focus"
VISIBILITY_CHANGE = "visibility_change"
SHOW_DASHBOARD = "show_dashboard"
HIDE_POPOVER = "hide_popover"

Handler = Callable[[Any], Union[None, Awaitable[None]]]


@dataclass(slots=True, eq=False)
class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`.

    Attributes:
        bus: Bus the subscription belongs to.
        name: Event name the handler listens to.
        handler: Callable invoked with the event payload.
        active: False once the subscription has been removed.
    """

    bus: "EventBus"
    name: str
    handler: Handler
    active: bool = field(default=True)

    def unsubscribe(self) -> None:
        """Detach the handler; calling this more than once is harmless."""
        if self.active:
            self.bus._remove(self)
            self.active = False


class EventBus:
    """Dispatch named events to subscribed handlers on the running event loop.

    Synchronous handlers run inline during :meth:`emit`; one that raises is
    logged and skipped so the remaining handlers still run. Coroutine handlers are
    scheduled as tasks; the bus keeps a reference to each task until it finishes
    so pending refreshes are not garbage collected mid-flight.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Subscription]] = defaultdict(list)
        self._tasks: set[asyncio.Task[Any]] = set()

    def subscribe(self, name: str, handler: Handler) -> Subscription:
        """Register ``handler`` for ``name`` and return its subscription."""
        subscription = Subscription(bus=self, name=name, handler=handler)
        self._handlers[name].append(subscription)
        return subscription

    def emit(self, name: str, payload: Any = None) -> None:
        """Deliver ``payload`` to every current subscriber of ``name``."""
        for subscription in list(self._handlers.get(name, ())):
            try:
                result = subscription.handler(payload)
            except Exception as exc:
                LOGGER.warning("Event handler for %s failed: %s", name, exc)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._task_finished)

    def subscriber_count(self, name: str) -> int:
        """Return how many handlers are listening to ``name``."""
        return len(self._handlers.get(name, ()))

    async def drain(self) -> None:
        """Wait for every coroutine handler scheduled so far to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _remove(self, subscription: Subscription) -> None:
        handlers = self._handlers.get(subscription.name)
        if handlers and subscription in handlers:
            handlers.remove(subscription)

    def _task_finished(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            LOGGER.warning("Event handler failed: %s", task.exception())


__all__ = [
    "EventBus",
    "Subscription",
    "REFERENCES_CHANGED",
    "WINDOW_FOCUS",
    "VISIBILITY_CHANGE",
    "SHOW_DASHBOARD",
    "HIDE_POPOVER",
]
