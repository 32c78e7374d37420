"""
Structured error types for shipyard.

Provides a small hierarchy of typed errors with metadata for error
categorisation, reporting, and root cause analysis through error chaining.

Deployment runs distinguish two kinds of failure. A task that exits with a
nonzero code is *data*: the runner inspects it and stops. Everything in this
module is the other kind, a *structural* failure (a definition that cannot be
found, built, or dispatched) that travels as an exception up to the
orchestrator boundary, where it is converted into the orchestration-failure
exit code.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per failure domain
    - **Rich Context:** Errors carry run/deployment/task metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       ShipyardError                              │
        │                (category, context, cause)                        │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  DefinitionError    DiscoveryError     ConstructionError         │
        │  (DEFINITION)       (DISCOVERY)        (CONSTRUCTION)            │
        │                                                                  │
        │  ResolutionError                       ConfigError               │
        │  (RESOLUTION)                          (CONFIG)                  │
        │       │                                                          │
        │  NoDispatcherError                                               │
        │  AmbiguousDispatcherError                                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Adding context to an error:

    >>> error = ConstructionError("Cannot build definition")
    >>> error.with_context(deployment="releases:Deploy_20240101_Init")
    ConstructionError('Cannot build definition', category=CONSTRUCTION)
    >>> error.context.deployment
    'releases:Deploy_20240101_Init'

    Chaining errors for root cause:

    >>> try:
    ...     raise ImportError("No module named 'releases'")
    ... except ImportError as e:
    ...     error = ConstructionError("Import failed", cause=e)
    >>> error.cause
    ImportError("No module named 'releases'")

Tags:
    error-handling, exception-hierarchy, error-context, shipyard
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Every ShipyardError has a category so that log processors and reports
    can group failures without inspecting exception class names.
    """

    DEFINITION = "DEFINITION"      # Malformed or misused definition
    DISCOVERY = "DISCOVERY"        # Definition files cannot be found/loaded
    CONSTRUCTION = "CONSTRUCTION"  # Definition cannot be instantiated
    RESOLUTION = "RESOLUTION"      # No (or no unique) dispatcher for a task
    DISPATCH = "DISPATCH"          # Dispatcher failed structurally
    CONFIG = "CONFIG"              # Invalid settings
    INTERNAL = "INTERNAL"          # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover the identifiers a deployment run knows about; any
    additional metadata goes into ``metadata``. ``to_dict()`` serialises all
    non-None fields for logging.

    Attributes:
        run_id: Run identifier
        deployment: Deployment definition identifier
        task: Task definition type name
        dispatcher: Dispatcher name
        metadata: Additional key-value pairs
    """

    run_id: str | None = None
    deployment: str | None = None
    task: str | None = None
    dispatcher: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["run_id", "deployment", "task", "dispatcher"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ShipyardError(Exception):
    """
    Base exception for all shipyard errors.

    All ShipyardError instances carry:
    - **category:** ErrorCategory enum for classification
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` to provide a sensible default for
    their domain.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ShipyardError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConstructionError("Failed").with_context(
                deployment="releases:Deploy_20240101_Init",
                run_id="a1b2c3d4e5f6",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DEFINITION ERRORS
# =============================================================================


class DefinitionError(ShipyardError):
    """A deployment definition was used outside its lifecycle.

    Raised e.g. when a task is added after the runner has already read the
    definition's task sequence.
    """

    default_category = ErrorCategory.DEFINITION


class DiscoveryError(ShipyardError):
    """Definition files could not be located or loaded."""

    default_category = ErrorCategory.DISCOVERY


class ConstructionError(ShipyardError):
    """The factory could not build a deployment definition from its identifier."""

    default_category = ErrorCategory.CONSTRUCTION


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================


class ResolutionError(ShipyardError):
    """
    No dispatcher could be selected for a task definition.

    Fatal to the containing deployment. The two concrete subclasses let
    callers tell "nothing can run this" apart from "more than one thing
    claims it" when the resolver runs with the strict policy.
    """

    default_category = ErrorCategory.RESOLUTION

    def __init__(
        self,
        message: str,
        *,
        task_type: str | None = None,
        candidates: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.task_type = task_type
        self.candidates = candidates or []
        if task_type:
            self.context.task = task_type
        if self.candidates:
            self.context.metadata["candidates"] = list(self.candidates)


class NoDispatcherError(ResolutionError):
    """No registered dispatcher can handle the task definition."""


class AmbiguousDispatcherError(ResolutionError):
    """More than one dispatcher can handle the task definition (strict policy)."""


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ShipyardError):
    """Invalid or inconsistent configuration."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "AmbiguousDispatcherError",
    "ConfigError",
    "ConstructionError",
    "DefinitionError",
    "DiscoveryError",
    "ErrorCategory",
    "ErrorContext",
    "NoDispatcherError",
    "ResolutionError",
    "ShipyardError",
]
