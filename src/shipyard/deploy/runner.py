"""Task and deployment runners.

Key Concepts:
    TaskRunner: One task definition → ``DispatchResult``. Publishes
        ``task.before_dispatch`` (vetoable) and ``task.after_dispatch``,
        resolves a dispatcher, invokes it.
    DeploymentRunner: One deployment definition → exit code. Calls
        ``define()`` once, runs tasks in order, stops at the first task whose
        exit code is greater than 0.

Failure model:
    A nonzero exit code is data. It is reported, returned, and stops the
    deployment, but nothing is raised. Structural failures (no dispatcher,
    ``define()`` raising, an observer raising, a dispatcher raising) are
    not caught here; they travel up to the orchestrator boundary.

State machine per deployment::

    not-started ──define()──▶ running ──exit 0 (last task)──▶ completed
                                 │
                                 └──exit > 0──▶ stopped-on-failure

No retries, no rollback.

Tags:
    runner, deployment, tasks, dispatch, events
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shipyard.core.events import EventBus
from shipyard.core.logging import LogContext, get_logger
from shipyard.deploy.definitions import DeploymentDefinition, TaskDefinition
from shipyard.deploy.events import (
    TASK_AFTER_DISPATCH,
    TASK_BEFORE_DISPATCH,
    AfterTaskDispatchEvent,
    BeforeTaskDispatchEvent,
)
from shipyard.deploy.reporting import Reporter, Verbosity
from shipyard.deploy.results import DispatchResult

if TYPE_CHECKING:
    from shipyard.execution.resolver import DispatcherResolver

logger = get_logger(__name__)


class TaskRunner:
    """Executes a single task definition.

    Parameters
    ----------
    bus
        Event bus for ``task.*`` events.
    resolver
        Picks the dispatcher for each task.
    reporter
        Receives task failure blocks and task output.
    """

    def __init__(self, bus: EventBus, resolver: DispatcherResolver, reporter: Reporter) -> None:
        self.bus = bus
        self.resolver = resolver
        self.reporter = reporter

    def run(
        self,
        task: TaskDefinition,
        deployment: DeploymentDefinition | None = None,
    ) -> DispatchResult:
        event = BeforeTaskDispatchEvent(task=task, deployment=deployment)
        self.bus.publish(TASK_BEFORE_DISPATCH, event)

        if event.prevent_dispatch:
            logger.info("task.skipped", task=type(task).__name__)
            self.reporter.write(
                f"Skipped {task.task_name}: {task.describe()}",
                Verbosity.VERBOSE,
            )
            return DispatchResult.skip()

        dispatcher = self.resolver.resolve(task)
        result = dispatcher.dispatch(task)

        if result.exit_code > 0:
            logger.warning(
                "task.failed",
                task=type(task).__name__,
                exit_code=result.exit_code,
            )
            self.reporter.write(
                f"Error while executing task ({result.exit_code})\n"
                f"Output: {result.output}\n"
                f"Error output: {result.error_output}"
            )

        if result.output:
            self.reporter.write(result.output.rstrip("\n"), Verbosity.VERBOSE)

        self.bus.publish(
            TASK_AFTER_DISPATCH,
            AfterTaskDispatchEvent(task=task, result=result, deployment=deployment),
        )
        return result


@dataclass
class DeploymentProgress:
    """Counters for the deployment currently (or last) run."""

    dispatched: int = 0
    skipped: int = 0


class DeploymentRunner:
    """Executes a single deployment definition, first failure wins."""

    def __init__(self, task_runner: TaskRunner, reporter: Reporter) -> None:
        self.task_runner = task_runner
        self.reporter = reporter
        self.progress = DeploymentProgress()

    def run(self, deployment: DeploymentDefinition) -> int:
        self.progress = DeploymentProgress()
        deployment.define()

        for task in deployment.task_definitions:
            self.reporter.write(
                f"Executing {deployment.name} => {task.task_name}",
                Verbosity.DEBUG,
            )

            with LogContext(task=task.task_name):
                result = self.task_runner.run(task, deployment)

            if result.skipped:
                self.progress.skipped += 1
            else:
                self.progress.dispatched += 1

            if result.exit_code > 0:
                return result.exit_code

        return 0


__all__ = ["DeploymentProgress", "DeploymentRunner", "TaskRunner"]
