"""Result models for shipyard deployment runs.

Pydantic v2 models that capture structured outcomes at three levels: one
task dispatch (``DispatchResult``), one deployment definition
(``DeploymentOutcome``) and the whole run (``RunResult``).

Why This Matters:
    CI only needs the process exit code, but the people reading the CI log
    need to know *which* definition failed, with which code, after how many
    tasks. ``RunResult`` carries both: ``exit_code`` is authoritative, the
    rest is for humans and ``model_dump_json()``.

Key Concepts:
    DispatchResult: Frozen value produced by a dispatcher. ``exit_code`` 0 is
        success, anything greater is a task failure.
    OverallStatus: PASSED, FAILED (task-level), ERROR (orchestration-level),
        SKIPPED, RUNNING, PENDING.
    DeploymentOutcome: One row per attempted deployment definition.
    RunResult: Aggregate. ``mark_complete()`` finalises timestamps,
        duration and summary.

Architecture Decisions:
    - ``DispatchResult`` is frozen (``ConfigDict(frozen=True)``): a
      dispatcher's verdict cannot be rewritten by observers.
    - ``mark_complete()`` pattern: caller invokes when done, the model
      derives duration and summary.

Tags:
    results, models, pydantic, deployment, status, reporting
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OverallStatus(str, Enum):
    """Status of a deployment or a whole run."""

    PASSED = "PASSED"
    FAILED = "FAILED"  # A task reported a nonzero exit code
    ERROR = "ERROR"  # The deployment raised (orchestration-level failure)
    SKIPPED = "SKIPPED"
    RUNNING = "RUNNING"
    PENDING = "PENDING"


class DispatchResult(BaseModel):
    """Outcome of dispatching one task definition.

    Example::

        result = DispatchResult(exit_code=0, output="ok")
        result.successful  # True
    """

    model_config = ConfigDict(frozen=True)

    exit_code: int = 0
    output: str = ""
    error_output: str = ""
    skipped: bool = False

    @property
    def successful(self) -> bool:
        return self.exit_code <= 0

    @classmethod
    def skip(cls) -> DispatchResult:
        """Synthetic result for a task vetoed by a before-dispatch observer."""
        return cls(exit_code=0, output="Skipped execution of task definition", skipped=True)


class DeploymentOutcome(BaseModel):
    """What happened to one deployment definition during a run."""

    identifier: str
    status: OverallStatus = OverallStatus.PENDING
    exit_code: int = 0
    tasks_dispatched: int = 0
    tasks_skipped: int = 0
    error: str | None = None
    error_type: str | None = None
    duration_seconds: float = 0.0


class RunResult(BaseModel):
    """Result of a full deployment run."""

    run_id: str
    started_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    completed_at: str | None = None
    duration_seconds: float = 0.0
    success: bool = True
    exit_code: int = 0
    discovered: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    deployments: list[DeploymentOutcome] = Field(default_factory=list)
    failed_identifier: str | None = None
    error: str | None = None
    overall_status: OverallStatus = OverallStatus.RUNNING
    summary: str = ""

    @property
    def definitions_executed(self) -> int:
        """Number of deployment definitions that were attempted."""
        return len(self.deployments)

    def mark_complete(self) -> None:
        """Finalise timestamps, status and summary."""
        now = datetime.now(UTC)
        self.completed_at = now.isoformat()
        start = datetime.fromisoformat(self.started_at)
        self.duration_seconds = (now - start).total_seconds()

        if self.success:
            self.overall_status = OverallStatus.PASSED
            self.summary = f"Finished executing {self.definitions_executed} definitions"
        else:
            failed = next(
                (d for d in self.deployments if d.status is OverallStatus.ERROR),
                None,
            )
            self.overall_status = OverallStatus.ERROR if failed or self.error else OverallStatus.FAILED
            target = self.failed_identifier or "run"
            self.summary = (
                f"Failed after executing {self.definitions_executed} definitions: "
                f"exit code {self.exit_code} in {target}"
            )


__all__ = [
    "DeploymentOutcome",
    "DispatchResult",
    "OverallStatus",
    "RunResult",
]
