"""Tests for shipyard.execution.resolver — dispatcher selection policies."""

import pytest

from shipyard.core.errors import AmbiguousDispatcherError, NoDispatcherError
from shipyard.execution.dispatchers.protocol import BaseTaskDispatcher
from shipyard.execution.registry import DispatcherRegistry
from shipyard.execution.resolver import DispatcherResolver, ResolutionPolicy
from tests._support import FakeTask, OrphanTask, RecordingDispatcher


class DuckDispatcher:
    """Protocol implementation without the base class."""

    def can_dispatch(self, task):
        return isinstance(task, OrphanTask)

    def dispatch(self, task):
        raise NotImplementedError


class SecondFakeDispatcher(BaseTaskDispatcher):
    task_types = (FakeTask,)


@pytest.fixture
def registry():
    registry = DispatcherRegistry()
    registry.register(RecordingDispatcher(), name="first")
    registry.register(SecondFakeDispatcher(), name="second")
    return registry


class TestFirstMatch:
    def test_first_capable_wins(self, registry):
        dispatcher = DispatcherResolver(registry).resolve(FakeTask())
        assert dispatcher is registry.get("first")

    def test_registration_order_decides(self):
        registry = DispatcherRegistry()
        registry.register(SecondFakeDispatcher(), name="second")
        registry.register(RecordingDispatcher(), name="first")
        assert isinstance(DispatcherResolver(registry).resolve(FakeTask()), SecondFakeDispatcher)

    def test_duck_typed_dispatcher(self, registry):
        duck = DuckDispatcher()
        registry.register(duck, name="duck")
        assert DispatcherResolver(registry).resolve(OrphanTask()) is duck

    def test_no_dispatcher(self, registry):
        with pytest.raises(NoDispatcherError, match="No dispatcher found for task definition OrphanTask") as exc_info:
            DispatcherResolver(registry).resolve(OrphanTask())
        assert exc_info.value.task_type == "OrphanTask"
        assert exc_info.value.context.metadata["registered"] == ["first", "second"]

    def test_empty_registry(self):
        with pytest.raises(NoDispatcherError):
            DispatcherResolver(DispatcherRegistry()).resolve(FakeTask())


class TestStrict:
    def test_ambiguous(self, registry):
        resolver = DispatcherResolver(registry, policy=ResolutionPolicy.STRICT)
        with pytest.raises(AmbiguousDispatcherError) as exc_info:
            resolver.resolve(FakeTask())
        assert exc_info.value.candidates == ["first", "second"]

    def test_unique_match(self, registry):
        registry.unregister("second")
        resolver = DispatcherResolver(registry, policy="strict")
        assert resolver.resolve(FakeTask()) is registry.get("first")

    def test_no_dispatcher(self, registry):
        resolver = DispatcherResolver(registry, policy=ResolutionPolicy.STRICT)
        with pytest.raises(NoDispatcherError):
            resolver.resolve(OrphanTask())


def test_candidates(registry):
    names = [name for name, _ in DispatcherResolver(registry).candidates(FakeTask())]
    assert names == ["first", "second"]


def test_policy_from_string():
    assert DispatcherResolver(DispatcherRegistry(), policy="first_match").policy is ResolutionPolicy.FIRST_MATCH
    with pytest.raises(ValueError):
        DispatcherResolver(DispatcherRegistry(), policy="random")
