"""Event system for deployment lifecycle hooks.

Why This Package Exists
-----------------------
The runners need to tell the outside world what they are doing (a
deployment is about to start, a task just finished) without importing the
code that cares. Plugins, history trackers, and dry-run mode all hang off the
same bus: they subscribe before the run starts and react while it runs.

Unlike a fire-and-forget notification bus, publishing here is synchronous
and blocking. Every subscriber runs to completion, in subscription order,
before ``publish`` returns, and subscribers may mutate the payload object.
That mutation is the only cancellation mechanism: a ``task.before_dispatch``
subscriber sets ``prevent_dispatch`` on the payload and the runner honours it.
Exceptions raised by a subscriber are not caught by the bus.

Usage::

    from shipyard.core.events import get_event_bus

    bus = get_event_bus()

    def skip_migrations(event):
        if isinstance(event.task, MigrationTask):
            event.prevent_dispatch = True

    sub_id = bus.subscribe("task.before_dispatch", skip_migrations)

    # Subscribe (supports wildcards: "task.*")
    bus.subscribe("*", lambda event: print(event))

Modules
-------
memory      InMemoryEventBus -- synchronous, single process
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "matches",
    "reset_event_bus",
    "set_event_bus",
]


# ── Type Aliases ─────────────────────────────────────────────────────────

EventHandler = Callable[[Any], None]


def matches(event_name: str, pattern: str) -> bool:
    """Check if an event name matches a subscription pattern.

    Examples:
        - ``task.*`` matches ``task.before_dispatch``, ``task.after_dispatch``
        - ``*`` matches everything
        - ``run.after`` matches exactly ``run.after``
    """
    if pattern == "*":
        return True
    if pattern.endswith(".*"):
        prefix = pattern[:-2]
        return event_name.startswith(prefix + ".")
    return event_name == pattern


# ── EventBus Protocol ────────────────────────────────────────────────────


@runtime_checkable
class EventBus(Protocol):
    """Protocol for event bus implementations.

    Supports publish/subscribe with wildcard patterns. Delivery is
    synchronous and in subscription order.
    """

    def publish(self, event_name: str, payload: Any) -> Any:
        """Deliver ``payload`` to every subscriber matching ``event_name``.

        Args:
            event_name: Dot-separated event name
            payload: Event object; subscribers may mutate it

        Returns:
            The same payload, after all subscribers ran
        """
        ...

    def subscribe(self, event_name: str, handler: EventHandler) -> str:
        """Subscribe to events matching a pattern.

        Args:
            event_name: Pattern to match (e.g., ``task.*``, ``run.after``)
            handler: Callback receiving the payload

        Returns:
            Subscription ID for later unsubscription
        """
        ...

    def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription.

        Args:
            subscription_id: ID returned from :meth:`subscribe`
        """
        ...


# ── Default Event Bus Singleton ──────────────────────────────────────────

_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus instance.

    Returns the configured event bus, creating an in-memory one if
    none has been set.
    """
    global _event_bus
    if _event_bus is None:
        from shipyard.core.events.memory import InMemoryEventBus

        _event_bus = InMemoryEventBus()
    return _event_bus


def set_event_bus(bus: EventBus) -> None:
    """Set the process-wide event bus instance."""
    global _event_bus
    _event_bus = bus


def reset_event_bus() -> None:
    """Drop the process-wide bus (for testing)."""
    global _event_bus
    _event_bus = None
