"""Task execution: dispatchers, their registry, and resolution.

Manifesto:
    Dispatchers must be swappable. This package provides local shell, ssh
    and in-process dispatchers behind a single protocol, an ordered
    registry, and the resolver that picks one per task definition.

Tags:
    shipyard, execution, dispatchers, registry, resolver
"""

from shipyard.execution.dispatchers import (
    BaseTaskDispatcher,
    CallableTaskDispatcher,
    RemoteShellTaskDispatcher,
    ShellTaskDispatcher,
    TaskDispatcher,
)
from shipyard.execution.registry import (
    DispatcherRegistry,
    get_default_registry,
    register_builtin_dispatchers,
    register_dispatcher,
    reset_default_registry,
)
from shipyard.execution.resolver import DispatcherResolver, ResolutionPolicy

__all__ = [
    "BaseTaskDispatcher",
    "CallableTaskDispatcher",
    "DispatcherRegistry",
    "DispatcherResolver",
    "RemoteShellTaskDispatcher",
    "ResolutionPolicy",
    "ShellTaskDispatcher",
    "TaskDispatcher",
    "get_default_registry",
    "register_builtin_dispatchers",
    "register_dispatcher",
    "reset_default_registry",
]
