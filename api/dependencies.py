"""
Shared dependencies for the Circles API.

This module provides:
- PocketBase client management (global instance, admin authentication)
- The graph store selected by settings (PocketBase or in-memory)
- Engine and writer factories used by the routers
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache

from circles.connection_requests import ConnectionRequestWriter
from circles.graph import GraphAccessor, GraphStore, InMemoryGraphStore, PocketBaseGraphStore
from circles.suggestions import SuggestionEngine
from pocketbase import PocketBase

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

# The PocketBase API is stateless; we only ever authenticate as admin,
# so one shared client serves every request.
_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Graph store, engine and writer
# ========================================


@lru_cache
def get_graph_store() -> GraphStore:
    """Get the process-wide graph store for the configured backend."""
    settings = get_settings()
    if settings.graph_backend == "memory":
        logger.warning("Using in-memory graph store (GRAPH_BACKEND=memory) - data is not persisted")
        return InMemoryGraphStore()
    return PocketBaseGraphStore(pb)


def get_suggestion_engine() -> SuggestionEngine:
    """Get a SuggestionEngine over the shared store."""
    settings = get_settings()
    return SuggestionEngine(
        GraphAccessor(get_graph_store()),
        mutual_sample_size=settings.mutual_sample_size,
        overfetch=settings.candidate_overfetch,
    )


def get_request_writer() -> ConnectionRequestWriter:
    """Get a ConnectionRequestWriter over the shared store."""
    return ConnectionRequestWriter(get_graph_store())


__all__ = [
    "pb",
    "pb_url",
    "authenticate_pb",
    "get_graph_store",
    "get_suggestion_engine",
    "get_request_writer",
]
