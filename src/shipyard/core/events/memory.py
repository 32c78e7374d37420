"""
In-memory event bus implementation.

Manifesto:
    A deployment run is a single sequential pass inside one process. The bus
    it needs has no queues, no threads and no persistence: ``publish`` walks
    the subscriber list and calls each matching handler in turn.

Handlers are called in subscription order. A handler that raises aborts the
publish call and the exception reaches whoever called ``publish``; the
remaining handlers for that event are not called.

Tags:
    shipyard, events, in-memory, synchronous, single-node

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from shipyard.core.events import EventHandler, matches
from shipyard.core.logging import get_logger

__all__ = ["InMemoryEventBus"]

logger = get_logger(__name__)


@dataclass
class Subscription:
    """Internal subscription record."""

    id: str
    pattern: str
    handler: EventHandler


class InMemoryEventBus:
    """Synchronous in-process event bus.

    Example::

        bus = InMemoryEventBus()

        def log_event(event):
            print(f"Event: {event!r}")

        bus.subscribe("*", log_event)
        bus.publish("run.before", RunStartedEvent(...))
        # Output: Event: RunStartedEvent(...)
    """

    def __init__(self) -> None:
        # dicts keep insertion order, which is the delivery order
        self._subscriptions: dict[str, Subscription] = {}

    def publish(self, event_name: str, payload: Any) -> Any:
        """Publish an event to all matching subscribers, in order.

        Exceptions raised by handlers propagate to the caller.
        """
        handlers = [
            sub for sub in list(self._subscriptions.values()) if matches(event_name, sub.pattern)
        ]
        logger.debug("event.publish", event_name=event_name, subscribers=len(handlers))

        for sub in handlers:
            sub.handler(payload)

        return payload

    def subscribe(self, event_name: str, handler: EventHandler) -> str:
        """Subscribe to events matching a pattern.

        Args:
            event_name: Pattern to match (supports ``*`` and ``type.*``)
            handler: Callback receiving the payload

        Returns:
            Subscription ID
        """
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        self._subscriptions[sub_id] = Subscription(
            id=sub_id,
            pattern=event_name,
            handler=handler,
        )
        return sub_id

    def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription."""
        self._subscriptions.pop(subscription_id, None)

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._subscriptions.clear()

    @property
    def subscription_count(self) -> int:
        """Number of active subscriptions."""
        return len(self._subscriptions)
