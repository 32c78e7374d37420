"""Operator-facing output with verbosity tiers.

The runners write plain text lines tagged with a tier; the reporter decides
what to show. The tiers follow the usual ``-v`` / ``-vv`` convention of
command-line tools:

==========  =========================================================
NORMAL      run summary, skip warnings, task failures, errors
VERBOSE     per-definition progress, task standard output
DEBUG       per-task progress, finished-definition markers
==========  =========================================================

Structured logs (structlog) are a separate channel and are not affected by
the reporter's level.

Tags:
    reporting, output, verbosity, rich, shipyard
"""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol, runtime_checkable

from rich.console import Console


class Verbosity(IntEnum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


@runtime_checkable
class Reporter(Protocol):
    """Anything that accepts tiered output lines."""

    def write(self, line: str, verbosity: Verbosity = Verbosity.NORMAL) -> None: ...


class ConsoleReporter:
    """Prints lines at or below ``level`` to a rich console.

    Lines are printed without markup interpretation so that command output
    containing square brackets survives intact.
    """

    def __init__(self, level: Verbosity = Verbosity.NORMAL, console: Console | None = None):
        self.level = level
        self.console = console or Console(highlight=False)

    def write(self, line: str, verbosity: Verbosity = Verbosity.NORMAL) -> None:
        if verbosity > self.level:
            return
        style = None
        if line.startswith("ERROR"):
            style = "bold red"
        elif line.startswith("WARNING"):
            style = "yellow"
        elif verbosity >= Verbosity.DEBUG:
            style = "dim"
        self.console.print(line, style=style, markup=False, highlight=False, soft_wrap=True)


class MemoryReporter:
    """Records every line with its tier (testing, embedding)."""

    def __init__(self) -> None:
        self.records: list[tuple[Verbosity, str]] = []

    def write(self, line: str, verbosity: Verbosity = Verbosity.NORMAL) -> None:
        self.records.append((verbosity, line))

    def lines(self, max_verbosity: Verbosity = Verbosity.DEBUG) -> list[str]:
        """Lines a reporter at ``max_verbosity`` would have shown."""
        return [line for level, line in self.records if level <= max_verbosity]

    @property
    def text(self) -> str:
        return "\n".join(self.lines())

    def clear(self) -> None:
        self.records.clear()


__all__ = ["ConsoleReporter", "MemoryReporter", "Reporter", "Verbosity"]
