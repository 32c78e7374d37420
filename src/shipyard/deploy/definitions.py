"""Deployment and task definition base classes.

A *deployment definition* is one logical deployment unit, usually one file in
the definitions directory. Its ``define()`` method declares an ordered list of
*task definitions*; the runner calls ``define()`` once, reads the tasks and
hands each to a dispatcher.

Example::

    from shipyard.deploy import DeploymentDefinition, ShellTask

    class Deploy_20240105_AddIndexes(DeploymentDefinition):
        def define(self):
            self.add_task(ShellTask("bin/migrate --step add_indexes"))
            self.add_task(ShellTask(["systemctl", "reload", "app"]))

Lifecycle:
    created by the factory → ``define()`` → ``task_definitions`` read
    (sequence sealed) → discarded after the run.

Tags:
    definitions, deployment, tasks, shipyard
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from shipyard.core.errors import DefinitionError


class TaskDefinition:
    """One unit of work inside a deployment definition.

    Task definitions carry configuration only; the dispatcher resolved for
    their concrete type does the work. Subclasses are usually dataclasses.
    """

    @property
    def task_name(self) -> str:
        return type(self).__name__

    def describe(self) -> str:
        """Short human-readable description used in reporter lines."""
        return self.task_name


class DeploymentDefinition(ABC):
    """Base class for deployment definitions.

    Subclasses implement :meth:`define` and call :meth:`add_task` from it.
    Once the task sequence has been read it is sealed: adding more tasks
    raises :class:`~shipyard.core.errors.DefinitionError`.
    """

    #: Set by the factory to the discovered identifier.
    identifier: str | None = None

    def __init__(self) -> None:
        self._tasks: list[TaskDefinition] = []
        self._sealed = False

    @abstractmethod
    def define(self) -> None:
        """Populate the task sequence. Called exactly once by the runner."""

    @property
    def name(self) -> str:
        return self.identifier or type(self).__name__

    def add_task(self, task: TaskDefinition) -> TaskDefinition:
        if self._sealed:
            raise DefinitionError(
                f"Cannot add {type(task).__name__} to {self.name}: task definitions already read"
            ).with_context(deployment=self.name, task=type(task).__name__)
        if not isinstance(task, TaskDefinition):
            raise DefinitionError(
                f"{type(task).__name__} is not a TaskDefinition"
            ).with_context(deployment=self.name)
        self._tasks.append(task)
        return task

    def add_tasks(self, tasks: Iterable[TaskDefinition]) -> None:
        for task in tasks:
            self.add_task(task)

    @property
    def task_definitions(self) -> tuple[TaskDefinition, ...]:
        """The ordered task sequence. Reading it seals the definition."""
        self._sealed = True
        return tuple(self._tasks)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.identifier!r}, tasks={len(self._tasks)})"


def is_deployment_definition_class(obj: object) -> bool:
    """True if ``obj`` is a concrete DeploymentDefinition subclass."""
    return (
        isinstance(obj, type)
        and issubclass(obj, DeploymentDefinition)
        and obj is not DeploymentDefinition
    )


__all__ = [
    "DeploymentDefinition",
    "TaskDefinition",
    "is_deployment_definition_class",
]
