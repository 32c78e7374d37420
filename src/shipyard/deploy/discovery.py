"""Definition discovery — find and load deployment definition files.

A definitions directory holds one Python file per deployment definition, and
each file defines a class with the same name as the file::

    definitions/
      Deploy_20240101_0900_CreateSchema.py   → class Deploy_20240101_0900_CreateSchema
      Deploy_20240105_1400_AddIndexes.py     → class Deploy_20240105_1400_AddIndexes

Files are returned sorted by name, so a sortable timestamp prefix gives the
execution order. Every file is imported under ``shipyard_definitions.<stem>``
and registered in ``sys.modules``; the identifier handed to the factory is
``"shipyard_definitions.<stem>:<stem>"``.

Whether the class in a file really is a ``DeploymentDefinition`` is not
checked here: the orchestrator skips non-conforming identifiers with a
warning.

Key Concepts:
    DefinitionDiscovery: Protocol the orchestrator depends on.
    DefinitionFileFinder: Directory-based implementation.
    StaticDiscovery: Fixed list of identifiers (embedding, tests).
"""

from __future__ import annotations

import importlib.util
import re
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType
from typing import Protocol, runtime_checkable

from shipyard.core.errors import DiscoveryError
from shipyard.core.logging import get_logger

logger = get_logger(__name__)

MODULE_NAMESPACE = "shipyard_definitions"

_INVALID_CHARS = re.compile(r"\W")


@runtime_checkable
class DefinitionDiscovery(Protocol):
    def find_executable_identifiers(self) -> list[str]: ...


class StaticDiscovery:
    """Discovery over a fixed, ordered list of identifiers."""

    def __init__(self, identifiers: Iterable[str]) -> None:
        self.identifiers = list(identifiers)

    def find_executable_identifiers(self) -> list[str]:
        return list(self.identifiers)


class DefinitionFileFinder:
    """Scan a directory for definition files and load them.

    Parameters
    ----------
    directory
        Directory containing definition files.
    pattern
        Glob matched against file names (not recursive).
    """

    def __init__(self, directory: str | Path, pattern: str = "*.py") -> None:
        self.directory = Path(directory)
        self.pattern = pattern

    def find(self) -> dict[str, Path]:
        """Load every definition file and map identifier → file path.

        Raises:
            DiscoveryError: If the directory is missing or a file fails to import
        """
        if not self.directory.is_dir():
            raise DiscoveryError(
                f"Definitions directory not found: {self.directory}"
            ).with_context(directory=str(self.directory))

        found: dict[str, Path] = {}
        for path in sorted(self.directory.glob(self.pattern), key=lambda p: p.name):
            if not path.is_file() or path.name.startswith("_"):
                continue
            module = self._load(path)
            found[f"{module.__name__}:{path.stem}"] = path

        logger.debug("definitions.found", directory=str(self.directory), count=len(found))
        return found

    def find_executable_identifiers(self) -> list[str]:
        return list(self.find())

    @staticmethod
    def module_name_for(path: Path) -> str:
        return f"{MODULE_NAMESPACE}.{_INVALID_CHARS.sub('_', path.stem)}"

    def _load(self, path: Path) -> ModuleType:
        module_name = self.module_name_for(path)
        existing = sys.modules.get(module_name)
        if existing is not None and getattr(existing, "__file__", None) == str(path):
            return existing

        self._ensure_namespace()
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise DiscoveryError(f"Cannot load definition file {path}").with_context(file=str(path))

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise DiscoveryError(
                f"Failed to import definition file {path.name}: {e}",
                cause=e,
            ).with_context(file=str(path)) from e

        logger.debug("definition.loaded", module=module_name, file=str(path))
        return module

    @staticmethod
    def _ensure_namespace() -> None:
        if MODULE_NAMESPACE not in sys.modules:
            namespace = ModuleType(MODULE_NAMESPACE)
            namespace.__path__ = []  # type: ignore[attr-defined]
            sys.modules[MODULE_NAMESPACE] = namespace


__all__ = [
    "DefinitionDiscovery",
    "DefinitionFileFinder",
    "MODULE_NAMESPACE",
    "StaticDiscovery",
]
