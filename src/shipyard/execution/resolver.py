"""Dispatcher resolution — which dispatcher runs this task?

The resolver asks every registered dispatcher, in registration order,
whether it can dispatch the task definition.

Policies:
    FIRST_MATCH  the first capable dispatcher wins (default)
    STRICT       more than one capable dispatcher is an error

Both policies raise :class:`~shipyard.core.errors.NoDispatcherError` when
nothing matches; STRICT raises
:class:`~shipyard.core.errors.AmbiguousDispatcherError` on more than one
match. Both are ``ResolutionError`` subclasses.
"""

from __future__ import annotations

from enum import Enum

from shipyard.core.errors import AmbiguousDispatcherError, NoDispatcherError
from shipyard.core.logging import get_logger
from shipyard.deploy.definitions import TaskDefinition
from shipyard.execution.dispatchers.protocol import TaskDispatcher
from shipyard.execution.registry import DispatcherRegistry

logger = get_logger(__name__)


class ResolutionPolicy(str, Enum):
    FIRST_MATCH = "first_match"
    STRICT = "strict"


class DispatcherResolver:
    """Maps a task definition to the dispatcher that executes it.

    Parameters
    ----------
    registry
        Ordered dispatcher bindings.
    policy
        What to do when more than one dispatcher claims a task.
    """

    def __init__(
        self,
        registry: DispatcherRegistry,
        policy: ResolutionPolicy | str = ResolutionPolicy.FIRST_MATCH,
    ) -> None:
        self.registry = registry
        self.policy = ResolutionPolicy(policy)

    def candidates(self, task: TaskDefinition) -> list[tuple[str, TaskDispatcher]]:
        """All bindings whose dispatcher can handle ``task``, in order."""
        return [(name, d) for name, d in self.registry.items() if d.can_dispatch(task)]

    def resolve(self, task: TaskDefinition) -> TaskDispatcher:
        task_type = type(task).__name__

        if self.policy is ResolutionPolicy.FIRST_MATCH:
            for name, dispatcher in self.registry.items():
                if dispatcher.can_dispatch(task):
                    logger.debug("dispatcher.resolved", task=task_type, dispatcher=name)
                    return dispatcher
            raise self._no_match(task_type)

        matches = self.candidates(task)
        if not matches:
            raise self._no_match(task_type)
        if len(matches) > 1:
            names = [name for name, _ in matches]
            raise AmbiguousDispatcherError(
                f"Multiple dispatchers can handle {task_type}: {', '.join(names)}",
                task_type=task_type,
                candidates=names,
            )

        name, dispatcher = matches[0]
        logger.debug("dispatcher.resolved", task=task_type, dispatcher=name)
        return dispatcher

    def _no_match(self, task_type: str) -> NoDispatcherError:
        registered = [name for name, _ in self.registry.items()]
        return NoDispatcherError(
            f"No dispatcher found for task definition {task_type}",
            task_type=task_type,
        ).with_context(registered=registered)


__all__ = ["DispatcherResolver", "ResolutionPolicy"]
