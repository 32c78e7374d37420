"""Deployment lifecycle events.

The event names below, each with its payload class, are the extension
surface of a run. Payloads are plain mutable dataclasses; only
``BeforeTaskDispatchEvent.prevent_dispatch`` and
``FindDefinitionsEvent.identifiers`` are meant to be changed by subscribers.

Order of events for a run with one deployment holding tasks A and B::

    run.before
    definitions.find
    deployment.before_dispatch
    task.before_dispatch   (A)
    task.after_dispatch    (A)
    task.before_dispatch   (B)
    task.after_dispatch    (B)
    deployment.after_dispatch
    run.after

A vetoed task gets ``task.before_dispatch`` but no ``task.after_dispatch``.

Example::

    from shipyard.core.events import get_event_bus
    from shipyard.deploy.events import TASK_BEFORE_DISPATCH

    def no_ssh_on_fridays(event):
        if isinstance(event.task, RemoteShellTask) and is_friday():
            event.prevent_dispatch = True

    get_event_bus().subscribe(TASK_BEFORE_DISPATCH, no_ssh_on_fridays)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shipyard.deploy.definitions import DeploymentDefinition, TaskDefinition
from shipyard.deploy.results import DispatchResult

if TYPE_CHECKING:
    from shipyard.deploy.config import DeployRunConfig

RUN_BEFORE = "run.before"
DEFINITIONS_FIND = "definitions.find"
DEPLOYMENT_BEFORE_DISPATCH = "deployment.before_dispatch"
TASK_BEFORE_DISPATCH = "task.before_dispatch"
TASK_AFTER_DISPATCH = "task.after_dispatch"
DEPLOYMENT_AFTER_DISPATCH = "deployment.after_dispatch"
RUN_AFTER = "run.after"

ALL_EVENTS = (
    RUN_BEFORE,
    DEFINITIONS_FIND,
    DEPLOYMENT_BEFORE_DISPATCH,
    TASK_BEFORE_DISPATCH,
    TASK_AFTER_DISPATCH,
    DEPLOYMENT_AFTER_DISPATCH,
    RUN_AFTER,
)


@dataclass
class BeforeRunEvent:
    config: DeployRunConfig


@dataclass
class FindDefinitionsEvent:
    """Discovered identifiers; subscribers may filter or extend the list."""

    identifiers: list[str]
    config: DeployRunConfig


@dataclass
class BeforeDeploymentDispatchEvent:
    deployment: DeploymentDefinition


@dataclass
class BeforeTaskDispatchEvent:
    """Set ``prevent_dispatch`` to skip the task. The task then reports exit code 0."""

    task: TaskDefinition
    deployment: DeploymentDefinition | None = None
    prevent_dispatch: bool = False


@dataclass
class AfterTaskDispatchEvent:
    task: TaskDefinition
    result: DispatchResult
    deployment: DeploymentDefinition | None = None


@dataclass
class AfterDeploymentDispatchEvent:
    """Published even when the deployment raised.

    ``deployment`` is None when the factory could not build the definition.
    ``success`` is the run's running success flag after this deployment.
    """

    identifier: str
    deployment: DeploymentDefinition | None
    success: bool
    exit_code: int = 0


@dataclass
class AfterRunEvent:
    success: bool
    exit_code: int = 0
    executed: list[str] = field(default_factory=list)


__all__ = [
    "ALL_EVENTS",
    "AfterDeploymentDispatchEvent",
    "AfterRunEvent",
    "AfterTaskDispatchEvent",
    "BeforeDeploymentDispatchEvent",
    "BeforeRunEvent",
    "BeforeTaskDispatchEvent",
    "DEFINITIONS_FIND",
    "DEPLOYMENT_AFTER_DISPATCH",
    "DEPLOYMENT_BEFORE_DISPATCH",
    "FindDefinitionsEvent",
    "RUN_AFTER",
    "RUN_BEFORE",
    "TASK_AFTER_DISPATCH",
    "TASK_BEFORE_DISPATCH",
]
