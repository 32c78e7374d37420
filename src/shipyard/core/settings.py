"""Process-level settings for shipyard.

``ShipyardSettings`` holds everything that stays the same across runs on a
machine: where definitions live, how dispatchers are resolved, and how logs
are rendered. Per-run input (run id, dry-run, identifier filter) lives in
:class:`shipyard.deploy.config.DeployRunConfig`.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-run
    - **Environment-driven:** Reads ``SHIPYARD_*`` env vars and ``.env``
    - **Sensible defaults:** Works out of the box for a local checkout

Examples:
    >>> from shipyard.core.settings import ShipyardSettings
    >>> settings = ShipyardSettings(dispatch_policy="strict")
    >>> settings.failure_exit_code
    5

Tags:
    settings, configuration, pydantic, environment, shipyard
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipyard.core.errors import ConfigError

#: Exit code returned when a deployment raises instead of reporting a task failure.
ORCHESTRATION_FAILURE_EXIT_CODE = 5


class ShipyardSettings(BaseSettings):
    """Settings shared by every run in this process.

    Fields
    ──────
    definitions_dir      : Directory scanned for deployment definition files
    definitions_pattern  : Glob used inside ``definitions_dir``
    dispatch_policy      : ``first_match`` or ``strict`` (fail on ambiguity)
    failure_exit_code    : Exit code for orchestration-level failures
    log_level            : Structlog log level
    log_format           : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIPYARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Discovery ────────────────────────────────────────────────
    definitions_dir: Path = Field(
        default=Path("definitions"),
        description="Directory containing deployment definition files",
    )
    definitions_pattern: str = "*.py"

    # ── Dispatch ─────────────────────────────────────────────────
    dispatch_policy: Literal["first_match", "strict"] = "first_match"
    failure_exit_code: int = Field(default=ORCHESTRATION_FAILURE_EXIT_CODE, ge=1, le=255)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_format: Literal["console", "json"] = "console"

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_settings(**overrides: Any) -> ShipyardSettings:
    """Build settings from the environment with explicit overrides on top.

    ``None`` overrides are ignored so CLI options that were not given fall
    through to the environment.

    Raises:
        ConfigError: If any value fails validation
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return ShipyardSettings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid shipyard settings: {problems}", cause=e) from e


__all__ = ["ORCHESTRATION_FAILURE_EXIT_CODE", "ShipyardSettings", "load_settings"]
