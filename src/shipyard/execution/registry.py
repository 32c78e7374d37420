"""Dispatcher Registry — ordered dispatcher bindings.

Manifesto:
The resolver needs a list of candidate dispatchers to ask "can you run this
task?". The registry decouples registration (at import time, in plugins,
or in a test fixture) from resolution (at dispatch time), and supports both
a global default and injectable instances for testing.

ARCHITECTURE
────────────
::

    DispatcherRegistry
      ├── .register(dispatcher, name)  ─ append binding (order matters)
      ├── .get(name)                   ─ lookup by name
      ├── .unregister(name)            ─ remove binding
      ├── .list_dispatchers()          ─ (name, task types) for display
      └── iter(registry)               ─ dispatchers in registration order

    register_dispatcher(name)   ─ class decorator (uses global registry)
    get_default_registry()      ─ module-level singleton with built-ins
    reset_default_registry()    ─ clear for testing

BEST PRACTICES
──────────────
- Register more specific dispatchers before generic ones; the default
  resolution policy picks the first capable dispatcher.
- Pass an explicit ``DispatcherRegistry`` in tests and call
  ``reset_default_registry()`` in fixtures that touch the global one.

Tags:
    shipyard, execution, registry, dispatcher-registry, lookup

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from shipyard.execution.dispatchers.protocol import TaskDispatcher

T = TypeVar("T")


class DispatcherRegistry:
    """Injectable, ordered dispatcher registry.

    Example:
        >>> registry = DispatcherRegistry()
        >>> registry.register(ShellTaskDispatcher())
        'ShellTaskDispatcher'
        >>> [name for name, _ in registry.items()]
        ['ShellTaskDispatcher']
    """

    def __init__(self) -> None:
        self._dispatchers: dict[str, TaskDispatcher] = {}

    def register(
        self,
        dispatcher: TaskDispatcher,
        name: str | None = None,
        *,
        replace: bool = False,
    ) -> str:
        """Register a dispatcher and return the name it is bound under.

        Args:
            dispatcher: Object implementing the TaskDispatcher protocol
            name: Binding name (default: the dispatcher's class name)
            replace: Allow replacing an existing binding in place

        Raises:
            TypeError: If ``dispatcher`` does not implement the protocol
            ValueError: If the name is taken and ``replace`` is False
        """
        if not isinstance(dispatcher, TaskDispatcher):
            raise TypeError(f"{dispatcher!r} does not implement can_dispatch()/dispatch()")

        key = name or type(dispatcher).__name__
        if key in self._dispatchers and not replace:
            raise ValueError(f"Dispatcher already registered under {key!r}")
        self._dispatchers[key] = dispatcher
        return key

    def get(self, name: str) -> TaskDispatcher:
        """Get a dispatcher by binding name.

        Raises:
            KeyError: If no dispatcher is bound under ``name``
        """
        if name not in self._dispatchers:
            raise KeyError(
                f"No dispatcher registered as {name!r}. Available: {list(self._dispatchers) or 'none'}"
            )
        return self._dispatchers[name]

    def has(self, name: str) -> bool:
        return name in self._dispatchers

    def unregister(self, name: str) -> bool:
        """Remove a binding. Returns False if it did not exist."""
        return self._dispatchers.pop(name, None) is not None

    def items(self) -> list[tuple[str, TaskDispatcher]]:
        return list(self._dispatchers.items())

    def list_dispatchers(self) -> list[dict[str, Any]]:
        """Describe bindings for display (CLI, docs)."""
        rows = []
        for name, dispatcher in self._dispatchers.items():
            task_types = getattr(dispatcher, "task_types", ())
            rows.append({
                "name": name,
                "dispatcher": type(dispatcher).__name__,
                "task_types": [t.__name__ for t in task_types],
            })
        return rows

    def clear(self) -> None:
        """Clear all bindings (for testing)."""
        self._dispatchers.clear()

    def __iter__(self) -> Iterator[TaskDispatcher]:
        return iter(list(self._dispatchers.values()))

    def __len__(self) -> int:
        return len(self._dispatchers)


def register_builtin_dispatchers(registry: DispatcherRegistry) -> DispatcherRegistry:
    """Bind the shell, ssh and callable dispatchers."""
    from shipyard.execution.dispatchers import (
        CallableTaskDispatcher,
        RemoteShellTaskDispatcher,
        ShellTaskDispatcher,
    )

    for dispatcher in (ShellTaskDispatcher(), RemoteShellTaskDispatcher(), CallableTaskDispatcher()):
        registry.register(dispatcher, replace=True)
    return registry


# === GLOBAL DEFAULT REGISTRY ===

_default_registry: DispatcherRegistry | None = None


def get_default_registry() -> DispatcherRegistry:
    """Get the global default registry.

    Created lazily on first access, with the built-in dispatchers bound.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = register_builtin_dispatchers(DispatcherRegistry())
    return _default_registry


def reset_default_registry() -> None:
    """Reset the global registry (for testing)."""
    global _default_registry
    _default_registry = None


# === DECORATOR API ===


def register_dispatcher(
    name: str | None = None,
    registry: DispatcherRegistry | None = None,
    **init_kwargs: Any,
) -> Callable[[type[T]], type[T]]:
    """Class decorator: instantiate and register a dispatcher.

    Example:
        >>> @register_dispatcher("k8s")
        ... class KubectlDispatcher(BaseTaskDispatcher):
        ...     task_types = (KubectlTask,)
        ...     def dispatch(self, task):
        ...         ...
    """

    def decorator(cls: type[T]) -> type[T]:
        target = registry if registry is not None else get_default_registry()
        target.register(cls(**init_kwargs), name=name or cls.__name__)
        return cls

    return decorator


__all__ = [
    "DispatcherRegistry",
    "get_default_registry",
    "register_builtin_dispatchers",
    "register_dispatcher",
    "reset_default_registry",
]
