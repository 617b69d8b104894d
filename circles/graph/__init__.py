"""Graph access: storage contract, backends and the async accessor."""

from .accessor import GraphAccessor
from .memory_store import InMemoryGraphStore
from .pocketbase_store import PocketBaseGraphStore
from .store import ACTIVE_OR_TERMINAL, GraphStore

__all__ = [
    "ACTIVE_OR_TERMINAL",
    "GraphAccessor",
    "GraphStore",
    "InMemoryGraphStore",
    "PocketBaseGraphStore",
]
