"""
Test support utilities for shipyard tests.

Task definitions, dispatchers and deployment definitions that are shared by
several test modules but are not fixtures themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from textwrap import dedent

from shipyard.core.errors import ConstructionError
from shipyard.deploy.definitions import DeploymentDefinition, TaskDefinition
from shipyard.deploy.factory import DeploymentFactory
from shipyard.deploy.results import DispatchResult
from shipyard.execution.dispatchers.protocol import BaseTaskDispatcher


@dataclass
class FakeTask(TaskDefinition):
    """Task whose outcome is decided by the test."""

    label: str = "fake"
    exit_code: int = 0
    output: str = ""
    error_output: str = ""

    def describe(self) -> str:
        return self.label


@dataclass
class ExplodingTask(TaskDefinition):
    """Task whose dispatcher raises instead of returning a result."""

    message: str = "dispatcher blew up"


@dataclass
class OrphanTask(TaskDefinition):
    """Task no registered dispatcher handles."""


class RecordingDispatcher(BaseTaskDispatcher):
    """Dispatches FakeTask/ExplodingTask and remembers every call."""

    task_types = (FakeTask, ExplodingTask)

    def __init__(self, events: list[str] | None = None) -> None:
        self.dispatched: list[TaskDefinition] = []
        self.events = events

    def dispatch(self, task):
        self.dispatched.append(task)
        if self.events is not None:
            self.events.append(f"dispatch:{task.describe()}")
        if isinstance(task, ExplodingTask):
            raise RuntimeError(task.message)
        return DispatchResult(
            exit_code=task.exit_code,
            output=task.output,
            error_output=task.error_output,
        )

    @property
    def labels(self) -> list[str]:
        return [task.describe() for task in self.dispatched]


class StaticDefinition(DeploymentDefinition):
    """Deployment definition built from a list of tasks handed in by the test."""

    tasks: list[TaskDefinition] = []

    def define(self) -> None:
        self.add_tasks(self.tasks)


def make_definition(name: str, *tasks: TaskDefinition) -> type[DeploymentDefinition]:
    """Create a named StaticDefinition subclass holding ``tasks``."""
    return type(name, (StaticDefinition,), {"tasks": list(tasks)})


class MappingFactory(DeploymentFactory):
    """Factory that resolves identifiers from a dict instead of importing."""

    def __init__(self, mapping: dict[str, object]) -> None:
        self.mapping = mapping
        self.created: list[str] = []

    def load(self, identifier: str) -> object:
        if identifier not in self.mapping:
            raise ConstructionError(f"Cannot import deployment definition {identifier}")
        return self.mapping[identifier]

    def create(self, identifier: str) -> DeploymentDefinition:
        definition = super().create(identifier)
        self.created.append(identifier)
        return definition


@dataclass
class DefinitionsDir:
    """Writes definition files into a temporary directory."""

    path: Path
    written: list[Path] = field(default_factory=list)

    def write(self, name: str, source: str) -> Path:
        target = self.path / f"{name}.py"
        target.write_text(dedent(source).lstrip(), encoding="utf-8")
        self.written.append(target)
        return target

    def write_callable_definition(self, name: str, exit_code: int = 0, output: str = "") -> Path:
        """A definition with one CallableTask returning ``exit_code``."""
        return self.write(
            name,
            f'''
            from shipyard.deploy import CallableTask, DeploymentDefinition, DispatchResult


            def step():
                return DispatchResult(exit_code={exit_code}, output={output!r})


            class {name}(DeploymentDefinition):
                def define(self):
                    self.add_task(CallableTask(step))
            ''',
        )
