"""TaskDispatcher Protocol — the single execution interface.

Manifesto:
The runners never know *how* a task is executed (local shell, ssh, a Python
function, a cloud API). They only know that some dispatcher claims the task
and returns a ``DispatchResult``. ``TaskDispatcher`` is a
``typing.Protocol``: any object with the two methods satisfies it, no base
class required.

ARCHITECTURE
────────────
::

    TaskDispatcher (Protocol)
      ├── .can_dispatch(task) ─ capability check used by the resolver
      └── .dispatch(task)     ─ blocking execution, returns DispatchResult

    BaseTaskDispatcher
      └── can_dispatch = isinstance(task, task_types)

    Implementations:
      ShellTaskDispatcher        ─ subprocess, local
      RemoteShellTaskDispatcher  ─ subprocess, ssh CLI
      CallableTaskDispatcher     ─ in-process Python callable

Related modules:
    registry.py — ordered dispatcher bindings
    resolver.py — picks the dispatcher for a task

Tags:
    shipyard, execution, dispatcher, protocol, interface

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import ClassVar, Protocol, runtime_checkable

from shipyard.deploy.definitions import TaskDefinition
from shipyard.deploy.results import DispatchResult


@runtime_checkable
class TaskDispatcher(Protocol):
    """Dispatcher adapter - how a task definition gets executed.

    Key responsibilities:
    - Declare which task definitions it handles
    - Execute one and report exit code and output

    A nonzero exit code is a normal result, not an exception. Raise only for
    structural failures (the dispatcher itself is broken or misconfigured).

    Example implementation:
        >>> class EchoDispatcher:
        ...     def can_dispatch(self, task) -> bool:
        ...         return isinstance(task, EchoTask)
        ...
        ...     def dispatch(self, task) -> DispatchResult:
        ...         return DispatchResult(exit_code=0, output=task.text)
    """

    def can_dispatch(self, task: TaskDefinition) -> bool:
        """Return True if this dispatcher can execute ``task``."""
        ...

    def dispatch(self, task: TaskDefinition) -> DispatchResult:
        """Execute ``task`` and block until it has finished."""
        ...


class BaseTaskDispatcher:
    """Convenience base: match tasks by type.

    Subclasses set ``task_types`` and implement ``dispatch``.
    """

    task_types: ClassVar[tuple[type[TaskDefinition], ...]] = ()

    @property
    def name(self) -> str:
        return type(self).__name__

    def can_dispatch(self, task: TaskDefinition) -> bool:
        return bool(self.task_types) and isinstance(task, self.task_types)

    def dispatch(self, task: TaskDefinition) -> DispatchResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.name}()"


__all__ = ["BaseTaskDispatcher", "TaskDispatcher"]
