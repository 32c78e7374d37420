"""Callable dispatcher — run a Python function as a task.

Return value mapping:
    None / True         → exit code 0
    False               → exit code 1
    int                 → that exit code
    str                 → exit code 0, the string as output
    DispatchResult      → returned as-is

Exceptions raised by the function are not caught: a crashing step is a
structural failure and ends up at the orchestrator boundary.
"""

from __future__ import annotations

from typing import Any

from shipyard.core.errors import ErrorCategory, ShipyardError
from shipyard.deploy.results import DispatchResult
from shipyard.deploy.tasks import CallableTask
from shipyard.execution.dispatchers.protocol import BaseTaskDispatcher


def to_dispatch_result(value: Any) -> DispatchResult:
    if isinstance(value, DispatchResult):
        return value
    if value is None or value is True:
        return DispatchResult()
    if value is False:
        return DispatchResult(exit_code=1)
    if isinstance(value, int):
        return DispatchResult(exit_code=value)
    if isinstance(value, str):
        return DispatchResult(output=value)
    raise ShipyardError(
        f"Callable task returned unsupported value of type {type(value).__name__}",
        category=ErrorCategory.DISPATCH,
    )


class CallableTaskDispatcher(BaseTaskDispatcher):
    task_types = (CallableTask,)

    def dispatch(self, task: CallableTask) -> DispatchResult:  # type: ignore[override]
        return to_dispatch_result(task.func(*task.args, **task.kwargs))


__all__ = ["CallableTaskDispatcher", "to_dispatch_result"]
