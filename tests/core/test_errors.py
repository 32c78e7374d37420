"""Tests for shipyard.core.errors — hierarchy, categories, context."""

import pytest

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


class TestErrorContext:
    def test_empty_to_dict(self):
        assert ErrorContext().to_dict() == {}

    def test_fields_and_metadata(self):
        ctx = ErrorContext(run_id="r1", deployment="mod:Deploy", metadata={"file": "x.py"})
        assert ctx.to_dict() == {"run_id": "r1", "deployment": "mod:Deploy", "file": "x.py"}


class TestShipyardError:
    def test_default_category(self):
        assert ShipyardError("boom").category is ErrorCategory.INTERNAL

    def test_explicit_category(self):
        err = ShipyardError("boom", category=ErrorCategory.DISPATCH)
        assert err.category is ErrorCategory.DISPATCH

    def test_message_and_str(self):
        err = ShipyardError("boom")
        assert err.message == "boom"
        assert str(err) == "boom"

    def test_cause_chains(self):
        cause = OSError("disk")
        err = ShipyardError("boom", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "disk"

    def test_with_context_known_and_unknown_keys(self):
        err = ShipyardError("boom").with_context(deployment="mod:Deploy", attempt=2)
        assert err.context.deployment == "mod:Deploy"
        assert err.context.metadata == {"attempt": 2}

    def test_with_context_returns_self(self):
        err = ConstructionError("boom")
        assert err.with_context(run_id="r1") is err

    def test_to_dict(self):
        err = DiscoveryError("missing").with_context(directory="/tmp/defs")
        assert err.to_dict() == {
            "error_type": "DiscoveryError",
            "message": "missing",
            "category": "DISCOVERY",
            "context": {"directory": "/tmp/defs"},
        }

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestCategories:
    @pytest.mark.parametrize(
        ("cls", "category"),
        [
            (DefinitionError, ErrorCategory.DEFINITION),
            (DiscoveryError, ErrorCategory.DISCOVERY),
            (ConstructionError, ErrorCategory.CONSTRUCTION),
            (ResolutionError, ErrorCategory.RESOLUTION),
            (NoDispatcherError, ErrorCategory.RESOLUTION),
            (AmbiguousDispatcherError, ErrorCategory.RESOLUTION),
            (ConfigError, ErrorCategory.CONFIG),
        ],
    )
    def test_default_category(self, cls, category):
        err = cls("x")
        assert isinstance(err, ShipyardError)
        assert err.category is category


class TestResolutionError:
    def test_task_type_goes_to_context(self):
        err = NoDispatcherError("none", task_type="ShellTask")
        assert err.task_type == "ShellTask"
        assert err.context.task == "ShellTask"
        assert err.candidates == []

    def test_candidates_go_to_metadata(self):
        err = AmbiguousDispatcherError("many", task_type="ShellTask", candidates=["a", "b"])
        assert err.candidates == ["a", "b"]
        assert err.context.metadata["candidates"] == ["a", "b"]

    def test_subclasses_caught_as_resolution_error(self):
        with pytest.raises(ResolutionError):
            raise AmbiguousDispatcherError("many")
