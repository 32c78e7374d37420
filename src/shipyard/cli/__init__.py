"""
CLI layer for shipyard.

Provides a Typer application whose commands delegate to the deployment
engine (``shipyard.deploy``). This package handles only terminal
transport: argument parsing, coloured output, and table formatting.

Entry point::

    shipyard --help
"""

from shipyard.cli.app import app

__all__ = ["app"]
