"""Adapters: tool bindings for external collaborators.

Public re-exports for convenient access.
"""

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.adapters.mock import MockAdapter
from marznodectl.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
