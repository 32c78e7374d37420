"""
Shipyard - ordered, event-driven deployment runs.

Subpackages:
- shipyard.core: errors, event bus, logging, settings
- shipyard.execution: task dispatchers, registry, resolution
- shipyard.deploy: definitions, runners, orchestrator, reporting
- shipyard.cli: the ``shipyard`` command
"""

__version__ = "0.1.0"
