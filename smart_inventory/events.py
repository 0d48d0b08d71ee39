"""
Inventory change feed.

Writers publish an InventoryEvent after every committed change to the
inventory table; listeners (the alert board, tests) subscribe and react.
Delivery is synchronous, in publish order. A failing listener is logged
and skipped; it never fails the write that triggered it.
"""

import logging
import datetime
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class InventoryEvent:
    """Notification that the inventory collection changed."""
    kind: str  # created, updated, stock_changed, deleted, priorities_reset, synced
    item_id: Optional[int] = None
    actor: Optional[str] = None
    occurred_at: datetime.datetime = field(default_factory=datetime.datetime.utcnow)


Listener = Callable[[InventoryEvent], None]


class ChangeFeed:
    """Minimal observable for inventory changes."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that removes the listener again.
        """
        if not callable(listener):
            raise TypeError("listener must be callable")
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: InventoryEvent) -> int:
        """Deliver an event to every listener. Returns how many succeeded."""
        delivered = 0
        for listener in list(self._listeners):
            try:
                listener(event)
                delivered += 1
            except Exception as e:
                logger.error(f"Inventory listener {listener!r} failed on '{event.kind}': {e}", exc_info=True)
        return delivered

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def clear(self):
        self._listeners.clear()
