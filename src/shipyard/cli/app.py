"""
Root Typer application for the shipyard CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from shipyard import __version__

app = Typer(
    name="shipyard",
    help="shipyard — run ordered deployment definitions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("shipyard-core")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"shipyard {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """shipyard CLI — discover and run deployment definitions."""


# ── Sub-command registration ─────────────────────────────────────────────

from shipyard.cli.deploy import app as deploy_app  # noqa: E402

app.add_typer(deploy_app, name="deploy", help="Run and inspect deployment definitions.")
