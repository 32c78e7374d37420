"""Built-in task definitions.

Each task type here has a matching dispatcher in
:mod:`shipyard.execution.dispatchers`. Plugins add their own pairs.

Tags:
    tasks, shell, ssh, callable, shipyard
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from shipyard.deploy.definitions import TaskDefinition


@dataclass
class ShellTask(TaskDefinition):
    """Run a local command.

    A string command runs through the shell; a sequence runs directly.
    ``timeout`` is enforced by the dispatcher, not by the runner.
    """

    command: str | Sequence[str]
    cwd: str | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None

    def describe(self) -> str:
        if isinstance(self.command, str):
            return self.command
        return " ".join(self.command)


@dataclass
class RemoteShellTask(TaskDefinition):
    """Run a command on a remote host through the ``ssh`` CLI."""

    host: str
    command: str
    user: str | None = None
    port: int = 22
    ssh_options: Sequence[str] = ()
    timeout: float | None = None

    @property
    def destination(self) -> str:
        return f"{self.user}@{self.host}" if self.user else self.host

    def describe(self) -> str:
        return f"{self.destination}: {self.command}"


@dataclass(init=False)
class CallableTask(TaskDefinition):
    """Call a Python function as a deployment step.

    Example::

        def warm_cache(region):
            ...

        self.add_task(CallableTask(warm_cache, "eu-west-1"))
    """

    func: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __init__(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def describe(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


__all__ = ["CallableTask", "RemoteShellTask", "ShellTask"]
