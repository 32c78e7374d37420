"""
Deployment engine — definitions, runners and the run orchestrator.

A *deployment definition* is a class that, when asked, registers an
ordered list of *task definitions*. A run discovers definitions, builds
each in turn, dispatches its tasks through the dispatcher registry and
stops at the first failure. Lifecycle events on the event bus let
observers watch, filter, extend or veto along the way.

Usage::

    from shipyard.deploy import (
        DeployRunConfig, DeploymentDefinition, ShellTask, build_orchestrator,
    )

    class Deploy_20240101_0900_Migrate(DeploymentDefinition):
        def define(self) -> None:
            self.add_task(ShellTask("alembic upgrade head"))

    exit_code = build_orchestrator().run(DeployRunConfig())

Modules:
    definitions   TaskDefinition, DeploymentDefinition
    tasks         ShellTask, RemoteShellTask, CallableTask
    events        Event names and payloads
    config        DeployRunConfig
    results       DispatchResult, DeploymentOutcome, RunResult
    reporting     Verbosity, ConsoleReporter, MemoryReporter
    discovery     DefinitionFileFinder, StaticDiscovery
    factory       DeploymentFactory
    runner        TaskRunner, DeploymentRunner
    orchestrator  RunOrchestrator, build_orchestrator
"""

from shipyard.deploy.config import DeployRunConfig
from shipyard.deploy.definitions import DeploymentDefinition, TaskDefinition
from shipyard.deploy.discovery import DefinitionDiscovery, DefinitionFileFinder, StaticDiscovery
from shipyard.deploy.events import (
    ALL_EVENTS,
    DEFINITIONS_FIND,
    DEPLOYMENT_AFTER_DISPATCH,
    DEPLOYMENT_BEFORE_DISPATCH,
    RUN_AFTER,
    RUN_BEFORE,
    TASK_AFTER_DISPATCH,
    TASK_BEFORE_DISPATCH,
    AfterDeploymentDispatchEvent,
    AfterRunEvent,
    AfterTaskDispatchEvent,
    BeforeDeploymentDispatchEvent,
    BeforeRunEvent,
    BeforeTaskDispatchEvent,
    FindDefinitionsEvent,
)
from shipyard.deploy.factory import DeploymentFactory
from shipyard.deploy.orchestrator import RunOrchestrator, build_orchestrator
from shipyard.deploy.reporting import ConsoleReporter, MemoryReporter, Reporter, Verbosity
from shipyard.deploy.results import DeploymentOutcome, DispatchResult, OverallStatus, RunResult
from shipyard.deploy.runner import DeploymentRunner, TaskRunner
from shipyard.deploy.tasks import CallableTask, RemoteShellTask, ShellTask

__all__ = [
    # Definitions
    "DeploymentDefinition",
    "TaskDefinition",
    "CallableTask",
    "RemoteShellTask",
    "ShellTask",
    # Events
    "ALL_EVENTS",
    "DEFINITIONS_FIND",
    "DEPLOYMENT_AFTER_DISPATCH",
    "DEPLOYMENT_BEFORE_DISPATCH",
    "RUN_AFTER",
    "RUN_BEFORE",
    "TASK_AFTER_DISPATCH",
    "TASK_BEFORE_DISPATCH",
    "AfterDeploymentDispatchEvent",
    "AfterRunEvent",
    "AfterTaskDispatchEvent",
    "BeforeDeploymentDispatchEvent",
    "BeforeRunEvent",
    "BeforeTaskDispatchEvent",
    "FindDefinitionsEvent",
    # Config / results
    "DeployRunConfig",
    "DeploymentOutcome",
    "DispatchResult",
    "OverallStatus",
    "RunResult",
    # Reporting
    "ConsoleReporter",
    "MemoryReporter",
    "Reporter",
    "Verbosity",
    # Engine
    "DefinitionDiscovery",
    "DefinitionFileFinder",
    "DeploymentFactory",
    "DeploymentRunner",
    "RunOrchestrator",
    "StaticDiscovery",
    "TaskRunner",
    "build_orchestrator",
]
