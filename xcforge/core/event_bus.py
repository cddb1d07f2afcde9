"""Event bus — fans progress and log events out to subscribers.

Replaces callback closures handed to the orchestrator: callers subscribe
to a channel and the orchestrator publishes.  A failing subscriber is
logged and skipped; it never aborts a build or starves the others.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from xcforge.models.events import EventKind

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """Routes events to every handler subscribed to their channel.

    Handlers are called synchronously on the publishing thread, in
    subscription order.  Subscribing the same handler twice is a no-op.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[Handler]] = {
            kind: [] for kind in EventKind
        }
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------

    def subscribe(self, kind: EventKind, handler: Handler) -> None:
        """Register *handler* for events published on *kind*."""
        with self._lock:
            if handler not in self._handlers[kind]:
                self._handlers[kind].append(handler)

    def unsubscribe(self, kind: EventKind, handler: Handler) -> None:
        """Remove a previously subscribed handler."""
        with self._lock:
            try:
                self._handlers[kind].remove(handler)
            except ValueError:
                pass

    def handlers(self, kind: EventKind) -> list[Handler]:
        """Return a copy of the handler list for *kind*."""
        with self._lock:
            return list(self._handlers[kind])

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    def publish(self, kind: EventKind, event: Any) -> int:
        """Deliver *event* to every handler on *kind*.

        Returns the number of handlers that accepted the event.
        """
        delivered = 0
        for handler in self.handlers(kind):
            try:
                handler(event)
                delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Event handler %r failed on %s event: %s", handler, kind.value, exc
                )
        return delivered
