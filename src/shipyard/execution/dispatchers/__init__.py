"""Dispatcher adapters - how task definitions get executed.

All dispatchers implement the same protocol, so the runners stay agnostic
of where and how a task runs.

Available dispatchers:
- ShellTaskDispatcher: local commands via subprocess
- RemoteShellTaskDispatcher: remote commands via the ssh CLI
- CallableTaskDispatcher: in-process Python callables

Example:
    >>> from shipyard.execution.dispatchers import ShellTaskDispatcher
    >>> from shipyard.deploy.tasks import ShellTask
    >>> dispatcher = ShellTaskDispatcher()
    >>> dispatcher.dispatch(ShellTask("echo ok")).output
    'ok\\n'

Tags:
    shipyard, execution, dispatchers, backend-abstraction
"""

from .callable import CallableTaskDispatcher
from .protocol import BaseTaskDispatcher, TaskDispatcher
from .shell import RemoteShellTaskDispatcher, ShellTaskDispatcher

__all__ = [
    "BaseTaskDispatcher",
    "CallableTaskDispatcher",
    "RemoteShellTaskDispatcher",
    "ShellTaskDispatcher",
    "TaskDispatcher",
]
