"""
CLI: ``shipyard deploy`` — run and inspect deployment definitions.

Usage::

    shipyard deploy run                          # run ./definitions
    shipyard deploy run --dir deploy/defs -v     # per-definition progress
    shipyard deploy run --only Deploy_0001 -vv   # one definition, debug output
    shipyard deploy run --dry-run                # walk everything, dispatch nothing
    shipyard deploy run --json                   # RunResult as JSON on stdout

    shipyard deploy list                         # discovered definitions
    shipyard deploy dispatchers                  # registered dispatchers

The process exits with the run's exit code: 0 on success, the failing task's
exit code on a task failure, and 5 (``SHIPYARD_FAILURE_EXIT_CODE``) when a
deployment could not be run at all.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from shipyard.core.errors import ConfigError, DiscoveryError
from shipyard.core.logging import configure_logging
from shipyard.core.settings import ShipyardSettings, load_settings

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)


def _settings(**overrides) -> ShipyardSettings:
    try:
        return load_settings(**overrides)
    except ConfigError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=2) from e


# ── Run ──────────────────────────────────────────────────────────────────


@app.command("run")
def deploy_run(
    definitions_dir: Path | None = typer.Option(
        None, "--dir", "-d", help="Definitions directory (default: SHIPYARD_DEFINITIONS_DIR).",
    ),
    only: list[str] = typer.Option(
        [], "--only", "-o", help="Run only this identifier or class name. Repeatable.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Walk every task without dispatching."),
    strict: bool = typer.Option(False, "--strict", help="Fail when more than one dispatcher matches."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="-v progress, -vv debug."),
    json_out: bool = typer.Option(False, "--json", help="Print the run result as JSON."),
    log_level: str | None = typer.Option(None, "--log-level", help="Structured log level."),
) -> None:
    """Run deployment definitions in order, stopping at the first failure."""
    from shipyard.deploy.config import DeployRunConfig
    from shipyard.deploy.orchestrator import build_orchestrator
    from shipyard.deploy.reporting import ConsoleReporter, Verbosity

    settings = _settings(
        definitions_dir=definitions_dir,
        dispatch_policy="strict" if strict else None,
        log_level=log_level,
    )
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

    verbosity = Verbosity(min(Verbosity.NORMAL + verbose, Verbosity.DEBUG))
    # With --json, stdout carries only the result document.
    reporter = ConsoleReporter(verbosity, console=err_console if json_out else console)

    config = DeployRunConfig(
        definitions_dir=settings.definitions_dir,
        only=only,
        dry_run=dry_run,
    )
    orchestrator = build_orchestrator(settings, reporter=reporter)
    result = orchestrator.execute(config)

    if json_out:
        typer.echo(result.model_dump_json(indent=2))

    raise typer.Exit(code=result.exit_code)


# ── Info commands ────────────────────────────────────────────────────────


@app.command("list")
def list_definitions(
    definitions_dir: Path | None = typer.Option(
        None, "--dir", "-d", help="Definitions directory (default: SHIPYARD_DEFINITIONS_DIR).",
    ),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List discovered definitions in execution order."""
    from shipyard.deploy.discovery import DefinitionFileFinder
    from shipyard.deploy.factory import DeploymentFactory

    settings = _settings(definitions_dir=definitions_dir)
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    finder = DefinitionFileFinder(settings.definitions_dir, pattern=settings.definitions_pattern)
    try:
        found = finder.find()
    except DiscoveryError as e:
        err_console.print(f"[red]✗ {e.message}[/]")
        raise typer.Exit(code=1) from e

    factory = DeploymentFactory()
    rows = [
        {
            "identifier": identifier,
            "file": str(path),
            "is_definition": factory.is_deployment_definition(identifier),
        }
        for identifier, path in found.items()
    ]

    if json_out:
        typer.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        console.print(f"[dim]No definitions in {settings.definitions_dir}[/]")
        return

    table = Table(title=f"Definitions in {settings.definitions_dir}")
    table.add_column("#", justify="right")
    table.add_column("Identifier", style="bold cyan")
    table.add_column("File")
    table.add_column("Definition")

    for position, row in enumerate(rows, start=1):
        table.add_row(
            str(position),
            row["identifier"],
            Path(row["file"]).name,
            "[green]yes[/]" if row["is_definition"] else "[yellow]skipped[/]",
        )

    console.print(table)


@app.command("dispatchers")
def list_dispatchers(
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """List registered dispatchers in resolution order."""
    from shipyard.execution.registry import get_default_registry

    settings = _settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    rows = get_default_registry().list_dispatchers()

    if json_out:
        typer.echo(json.dumps(rows, indent=2))
        return

    table = Table(title="Registered Dispatchers")
    table.add_column("Name", style="bold cyan")
    table.add_column("Class")
    table.add_column("Task types")

    for row in rows:
        table.add_row(row["name"], row["dispatcher"], ", ".join(row["task_types"]) or "—")

    console.print(table)
