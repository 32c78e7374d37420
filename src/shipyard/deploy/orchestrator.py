"""Run orchestrator — the top-level deployment run.

Provides ``RunOrchestrator``, which coordinates a full run: discovery →
per-definition construction and dispatch → aggregation → exit code, with
lifecycle events published at each boundary.

Why This Matters:
    A deployment run must leave the system in a known state and tell CI
    exactly what happened. The orchestrator guarantees three things:

    1. Definitions run in discovery order, one at a time, and the run stops
       at the first failing definition.
    2. ``deployment.after_dispatch`` is published for every attempted
       definition, and ``run.after`` for every run, even when something
       raised.
    3. The exit code distinguishes "a task failed" (the task's own exit
       code) from "the run broke" (``failure_exit_code``, 5 by default).

Key Concepts:
    RunOrchestrator: ``execute(config)`` → ``RunResult``;
        ``run(config)`` → process exit code.
    build_orchestrator(): Wires settings, bus, registry, reporter and the
        directory-based discovery into a ready orchestrator.

Architecture Decisions:
    - Single failure boundary: structural errors (construction, resolution,
      observer failures, dispatcher crashes) are caught here and nowhere
      below. Task exit codes are never turned into exceptions.
    - after-dispatch in ``finally``: subscribers always see the outcome of
      an attempt, including failed constructions (``deployment`` is None).
    - Dry run is an observer: it vetoes every ``task.before_dispatch``
      instead of adding a code path to the runners.

Related Modules:
    - :mod:`shipyard.deploy.runner` — DeploymentRunner and TaskRunner
    - :mod:`shipyard.deploy.events` — event names and payloads
    - :mod:`shipyard.deploy.discovery` — definition discovery
    - :mod:`shipyard.deploy.factory` — definition construction

Tags:
    orchestration, deployment, runner, events, exit-code
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

from shipyard.core.events import EventBus, get_event_bus
from shipyard.core.logging import LogContext, get_logger
from shipyard.core.settings import ORCHESTRATION_FAILURE_EXIT_CODE, ShipyardSettings
from shipyard.deploy.config import DeployRunConfig
from shipyard.deploy.definitions import DeploymentDefinition
from shipyard.deploy.discovery import DefinitionDiscovery, DefinitionFileFinder
from shipyard.deploy.events import (
    DEFINITIONS_FIND,
    DEPLOYMENT_AFTER_DISPATCH,
    DEPLOYMENT_BEFORE_DISPATCH,
    RUN_AFTER,
    RUN_BEFORE,
    TASK_BEFORE_DISPATCH,
    AfterDeploymentDispatchEvent,
    AfterRunEvent,
    BeforeDeploymentDispatchEvent,
    BeforeRunEvent,
    BeforeTaskDispatchEvent,
    FindDefinitionsEvent,
)
from shipyard.deploy.factory import DeploymentFactory
from shipyard.deploy.reporting import ConsoleReporter, Reporter, Verbosity
from shipyard.deploy.results import DeploymentOutcome, OverallStatus, RunResult
from shipyard.deploy.runner import DeploymentRunner, TaskRunner

if TYPE_CHECKING:
    from shipyard.execution.registry import DispatcherRegistry

logger = get_logger(__name__)


def _describe_error(exc: BaseException) -> dict:
    if hasattr(exc, "to_dict"):
        return exc.to_dict()
    return {"error_type": type(exc).__name__, "message": str(exc)}


class RunOrchestrator:
    """Drives a full deployment run.

    Parameters
    ----------
    discovery
        Produces the ordered identifiers to run.
    factory
        Builds definitions from identifiers.
    deployment_runner
        Runs one definition.
    bus
        Event bus shared by the whole run.
    reporter
        Operator-facing output.
    failure_exit_code
        Exit code for orchestration-level failures.
    definitions_pattern
        Glob used when a run config names its own ``definitions_dir``.

    Example::

        orchestrator = build_orchestrator(ShipyardSettings())
        exit_code = orchestrator.run(DeployRunConfig(dry_run=True))
    """

    def __init__(
        self,
        discovery: DefinitionDiscovery | None,
        factory: DeploymentFactory,
        deployment_runner: DeploymentRunner,
        bus: EventBus,
        reporter: Reporter,
        failure_exit_code: int = ORCHESTRATION_FAILURE_EXIT_CODE,
        definitions_pattern: str = "*.py",
    ) -> None:
        self.discovery = discovery
        self.factory = factory
        self.deployment_runner = deployment_runner
        self.bus = bus
        self.reporter = reporter
        self.failure_exit_code = failure_exit_code
        self.definitions_pattern = definitions_pattern

    def run(self, config: DeployRunConfig | None = None) -> int:
        """Execute the run and return the process exit code."""
        return self.execute(config).exit_code

    def execute(self, config: DeployRunConfig | None = None) -> RunResult:
        """Execute the run and return the structured result."""
        config = config or DeployRunConfig()
        result = RunResult(run_id=config.run_id)
        subscriptions = self._install_run_observers(config)

        with LogContext(run_id=config.run_id):
            logger.info("run.started", dry_run=config.dry_run)
            try:
                self.bus.publish(RUN_BEFORE, BeforeRunEvent(config=config))
                identifiers = self._find_identifiers(config)
                result.discovered = list(identifiers)
                self.reporter.write(f"Executing {len(identifiers)} definitions")

                for identifier in identifiers:
                    if not self.factory.is_deployment_definition(identifier):
                        self._skip(identifier, result)
                        continue

                    self._dispatch_deployment(identifier, result)

                    if not result.success:
                        break

            except Exception as e:
                # Raised outside any deployment: run.before / definitions.find
                # observers, discovery, or an after-dispatch observer.
                result.success = False
                result.exit_code = self.failure_exit_code
                result.error = str(e)
                logger.error("run.failed", **_describe_error(e))
                self.reporter.write(f"ERROR ({type(e).__name__}): {e}")

            finally:
                for sub_id in subscriptions:
                    self.bus.unsubscribe(sub_id)

            result.mark_complete()
            self.bus.publish(
                RUN_AFTER,
                AfterRunEvent(
                    success=result.success,
                    exit_code=result.exit_code,
                    executed=[d.identifier for d in result.deployments],
                ),
            )
            logger.info(
                "run.finished",
                success=result.success,
                exit_code=result.exit_code,
                executed=result.definitions_executed,
            )

        self.reporter.write(result.summary)
        return result

    # ------------------------------------------------------------------
    # Private methods
    # ------------------------------------------------------------------

    def _find_identifiers(self, config: DeployRunConfig) -> list[str]:
        discovery = self.discovery
        if config.definitions_dir is not None:
            discovery = DefinitionFileFinder(config.definitions_dir, pattern=self.definitions_pattern)

        identifiers = discovery.find_executable_identifiers() if discovery else []
        event = FindDefinitionsEvent(identifiers=list(identifiers), config=config)
        self.bus.publish(DEFINITIONS_FIND, event)
        return list(event.identifiers)

    def _skip(self, identifier: str, result: RunResult) -> None:
        result.skipped.append(identifier)
        logger.warning("definition.skipped", identifier=identifier)
        self.reporter.write(
            f"WARNING: Skipping definition {identifier} since it does not implement "
            f"{DeploymentDefinition.__name__}"
        )

    def _dispatch_deployment(self, identifier: str, result: RunResult) -> None:
        outcome = DeploymentOutcome(identifier=identifier, status=OverallStatus.RUNNING)
        result.deployments.append(outcome)
        deployment: DeploymentDefinition | None = None
        runner_entered = False
        start = time.time()

        self.reporter.write(f"Execute definition {identifier}", Verbosity.VERBOSE)

        with LogContext(deployment=identifier):
            try:
                deployment = self.factory.create(identifier)
                self.bus.publish(
                    DEPLOYMENT_BEFORE_DISPATCH,
                    BeforeDeploymentDispatchEvent(deployment=deployment),
                )

                runner_entered = True
                exit_code = self.deployment_runner.run(deployment)
                outcome.exit_code = exit_code

                if exit_code != 0:
                    result.success = False
                    result.exit_code = exit_code
                    result.failed_identifier = identifier
                    outcome.status = OverallStatus.FAILED
                    logger.error("deployment.failed", exit_code=exit_code)
                    self.reporter.write(
                        f"ERROR: Failed to execute definition {identifier} (exit code {exit_code})"
                    )
                else:
                    outcome.status = OverallStatus.PASSED
                    logger.info("deployment.finished")
                    self.reporter.write(
                        f"Finished executing definition {identifier}",
                        Verbosity.DEBUG,
                    )

            except Exception as e:
                result.success = False
                result.exit_code = self.failure_exit_code
                result.failed_identifier = identifier
                outcome.status = OverallStatus.ERROR
                outcome.exit_code = self.failure_exit_code
                outcome.error = str(e)
                outcome.error_type = type(e).__name__
                logger.error("deployment.error", **_describe_error(e))
                self.reporter.write(f"ERROR ({type(e).__name__}): {e}")

            finally:
                if runner_entered:
                    progress = self.deployment_runner.progress
                    outcome.tasks_dispatched = progress.dispatched
                    outcome.tasks_skipped = progress.skipped
                outcome.duration_seconds = time.time() - start
                self.bus.publish(
                    DEPLOYMENT_AFTER_DISPATCH,
                    AfterDeploymentDispatchEvent(
                        identifier=identifier,
                        deployment=deployment,
                        success=result.success,
                        exit_code=outcome.exit_code,
                    ),
                )

    def _install_run_observers(self, config: DeployRunConfig) -> list[str]:
        """Subscribe the observers implied by the run config."""
        subscriptions = []

        if config.only:
            def select_only(event: FindDefinitionsEvent) -> None:
                event.identifiers[:] = [i for i in event.identifiers if event.config.selects(i)]

            subscriptions.append(self.bus.subscribe(DEFINITIONS_FIND, select_only))

        if config.dry_run:
            def prevent_dispatch(event: BeforeTaskDispatchEvent) -> None:
                event.prevent_dispatch = True

            subscriptions.append(self.bus.subscribe(TASK_BEFORE_DISPATCH, prevent_dispatch))

        return subscriptions


def build_orchestrator(
    settings: ShipyardSettings | None = None,
    *,
    reporter: Reporter | None = None,
    bus: EventBus | None = None,
    registry: DispatcherRegistry | None = None,
    discovery: DefinitionDiscovery | None = None,
    definitions_dir: Path | None = None,
) -> RunOrchestrator:
    """Wire a ready-to-run orchestrator.

    Parameters
    ----------
    settings
        Process settings (default: read from the environment).
    reporter
        Output sink (default: ``ConsoleReporter`` at NORMAL).
    bus
        Event bus (default: the process-wide bus).
    registry
        Dispatcher registry (default: the global registry with built-ins).
    discovery
        Identifier source (default: ``DefinitionFileFinder`` over
        ``definitions_dir`` or ``settings.definitions_dir``).
    """
    # Deferred: shipyard.execution imports shipyard.deploy submodules.
    from shipyard.execution.registry import get_default_registry
    from shipyard.execution.resolver import DispatcherResolver, ResolutionPolicy

    settings = settings or ShipyardSettings()
    reporter = reporter if reporter is not None else ConsoleReporter()
    bus = bus if bus is not None else get_event_bus()
    registry = registry if registry is not None else get_default_registry()

    if discovery is None:
        discovery = DefinitionFileFinder(
            definitions_dir or settings.definitions_dir,
            pattern=settings.definitions_pattern,
        )

    resolver = DispatcherResolver(registry, policy=ResolutionPolicy(settings.dispatch_policy))
    task_runner = TaskRunner(bus, resolver, reporter)

    return RunOrchestrator(
        discovery=discovery,
        factory=DeploymentFactory(),
        deployment_runner=DeploymentRunner(task_runner, reporter),
        bus=bus,
        reporter=reporter,
        failure_exit_code=settings.failure_exit_code,
        definitions_pattern=settings.definitions_pattern,
    )


__all__ = ["RunOrchestrator", "build_orchestrator"]
