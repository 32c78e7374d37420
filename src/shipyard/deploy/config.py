"""Per-run configuration for shipyard.

``DeployRunConfig`` is the run input: it is what ``run.before`` and
``definitions.find`` subscribers receive, and what the CLI builds from its
options. Machine-wide settings live in
:class:`shipyard.core.settings.ShipyardSettings`.

Key Concepts:
    run_id: Auto-generated 12-hex-char identifier bound into every log line.
    only: Optional allow-list of identifiers (or bare class names) applied
        through the ``definitions.find`` hook.
    definitions_dir: Scan this directory instead of the discovery the
        orchestrator was built with.
    dry_run: Walk every definition but veto every task dispatch.
    options: Free-form values for plugins and observers.

Override precedence: CLI options > ``SHIPYARD_*`` env vars > field defaults.

Tags:
    config, pydantic, deployment, run
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator


class DeployRunConfig(BaseModel):
    """Input for one deployment run.

    Example::

        config = DeployRunConfig(definitions_dir=Path("deploy/definitions"), dry_run=True)
    """

    run_id: str = ""
    definitions_dir: Path | None = Field(
        default=None,
        description="Overrides ShipyardSettings.definitions_dir for this run",
    )
    only: list[str] = Field(
        default_factory=list,
        description="Identifiers (or class names) to run; empty runs everything",
    )
    dry_run: bool = False
    options: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _ensure_run_id(self) -> DeployRunConfig:
        if not self.run_id:
            self.run_id = uuid.uuid4().hex[:12]
        return self

    def selects(self, identifier: str) -> bool:
        """True if ``identifier`` passes the ``only`` filter."""
        if not self.only:
            return True
        class_name = identifier.rpartition(":")[2].rpartition(".")[2]
        return identifier in self.only or class_name in self.only


__all__ = ["DeployRunConfig"]
