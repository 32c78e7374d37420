"""Deployment factory — identifier → DeploymentDefinition instance.

Identifiers are import paths, either ``"package.module:ClassName"`` or
``"package.module.ClassName"``. The factory answers two questions for the
orchestrator: *is this a deployment definition?* (a plain predicate, used
to skip with a warning) and *build it* (raising ``ConstructionError``).
"""

from __future__ import annotations

import importlib

from shipyard.core.errors import ConstructionError
from shipyard.core.logging import get_logger
from shipyard.deploy.definitions import DeploymentDefinition, is_deployment_definition_class

logger = get_logger(__name__)


def split_identifier(identifier: str) -> tuple[str, str]:
    """Split an identifier into (module path, attribute name)."""
    if ":" in identifier:
        module_path, _, attr = identifier.partition(":")
    else:
        module_path, _, attr = identifier.rpartition(".")
    if not module_path or not attr:
        raise ValueError(f"Not an importable identifier: {identifier!r}")
    return module_path, attr


class DeploymentFactory:
    """Builds deployment definitions from discovered identifiers."""

    def load(self, identifier: str) -> object:
        """Import the object an identifier points at.

        Raises:
            ConstructionError: If the module or attribute cannot be imported
        """
        try:
            module_path, attr = split_identifier(identifier)
            module = importlib.import_module(module_path)
            return getattr(module, attr)
        except (ImportError, AttributeError, ValueError) as e:
            raise ConstructionError(
                f"Cannot import deployment definition {identifier}: {e}",
                cause=e,
            ).with_context(deployment=identifier) from e

    def resolve(self, identifier: str) -> object | None:
        """Like :meth:`load`, but None if the identifier does not resolve."""
        try:
            return self.load(identifier)
        except ConstructionError as e:
            logger.debug("definition.unresolved", identifier=identifier, error=str(e.cause))
            return None

    def is_deployment_definition(self, identifier: str) -> bool:
        return is_deployment_definition_class(self.resolve(identifier))

    def create(self, identifier: str) -> DeploymentDefinition:
        """Instantiate the definition for ``identifier``.

        Raises:
            ConstructionError: If the identifier cannot be imported, is not a
                DeploymentDefinition, or its constructor fails
        """
        cls = self.load(identifier)
        if not is_deployment_definition_class(cls):
            raise ConstructionError(
                f"{identifier} is not a DeploymentDefinition"
            ).with_context(deployment=identifier)

        try:
            definition = cls()
        except Exception as e:
            raise ConstructionError(
                f"Cannot instantiate {identifier}: {e}",
                cause=e,
            ).with_context(deployment=identifier) from e

        definition.identifier = identifier
        return definition


__all__ = ["DeploymentFactory", "split_identifier"]
