"""
Shipyard core primitives: errors, events, logging, settings.

Everything in ``shipyard.core`` is free of deployment semantics; the
deployment engine in :mod:`shipyard.deploy` and the dispatchers in
:mod:`shipyard.execution` build on it.
"""

from shipyard.core.errors import (
    AmbiguousDispatcherError,
    ConfigError,
    ConstructionError,
    DefinitionError,
    DiscoveryError,
    ErrorCategory,
    ErrorContext,
    NoDispatcherError,
    ResolutionError,
    ShipyardError,
)
from shipyard.core.events import EventBus, get_event_bus, reset_event_bus, set_event_bus
from shipyard.core.events.memory import InMemoryEventBus

__all__ = [
    "AmbiguousDispatcherError",
    "ConfigError",
    "ConstructionError",
    "DefinitionError",
    "DiscoveryError",
    "ErrorCategory",
    "ErrorContext",
    "EventBus",
    "InMemoryEventBus",
    "NoDispatcherError",
    "ResolutionError",
    "ShipyardError",
    "get_event_bus",
    "reset_event_bus",
    "set_event_bus",
]
