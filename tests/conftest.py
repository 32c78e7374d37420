"""
Shared pytest fixtures and configuration for shipyard tests.

This module provides:
- Global state cleanup (event bus, dispatcher registry, log context,
  loaded definition modules) for test isolation
- A fresh bus, registry, recording dispatcher and memory reporter
- A temporary definitions directory

Usage:
    Fixtures are auto-discovered by pytest::

        def test_something(bus, registry, recorder, reporter):
            ...
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from shipyard.core.events import reset_event_bus
from shipyard.core.events.memory import InMemoryEventBus
from shipyard.core.logging import clear_context
from shipyard.deploy.discovery import MODULE_NAMESPACE
from shipyard.deploy.reporting import MemoryReporter
from shipyard.execution.registry import DispatcherRegistry, reset_default_registry
from shipyard.execution.resolver import DispatcherResolver
from tests._support import DefinitionsDir, RecordingDispatcher


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Global State Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_global_state() -> Generator[None, None, None]:
    """
    Reset process-wide singletons before and after each test.

    Covers the default event bus, the default dispatcher registry, bound
    log context, structlog configuration (the CLI configures it against
    the CliRunner's streams), and definition modules loaded from temporary
    directories.
    """
    reset_event_bus()
    reset_default_registry()
    clear_context()
    yield
    reset_event_bus()
    reset_default_registry()
    clear_context()
    structlog.reset_defaults()
    for name in [m for m in sys.modules if m.startswith(f"{MODULE_NAMESPACE}.")]:
        del sys.modules[name]


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def bus() -> InMemoryEventBus:
    """A fresh, empty event bus."""
    return InMemoryEventBus()


@pytest.fixture
def recorder() -> RecordingDispatcher:
    """Dispatcher for FakeTask/ExplodingTask that records what it ran."""
    return RecordingDispatcher()


@pytest.fixture
def registry(recorder: RecordingDispatcher) -> DispatcherRegistry:
    """Registry holding only the recording dispatcher."""
    registry = DispatcherRegistry()
    registry.register(recorder, name="recorder")
    return registry


@pytest.fixture
def resolver(registry: DispatcherRegistry) -> DispatcherResolver:
    return DispatcherResolver(registry)


@pytest.fixture
def reporter() -> MemoryReporter:
    return MemoryReporter()


# =============================================================================
# Filesystem Fixtures
# =============================================================================


@pytest.fixture
def definitions_dir(tmp_path: Path) -> DefinitionsDir:
    """Empty definitions directory with helpers to write definition files."""
    path = tmp_path / "definitions"
    path.mkdir()
    return DefinitionsDir(path)
