"""Read-only graph queries used by the suggestion engine.

Wraps a blocking GraphStore and moves each call off the event loop with
``asyncio.to_thread`` so independent lookups can be gathered concurrently.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Collection, Iterable

from ..models import ConnectionRequest, RequestStatus, UserProfile
from .store import GraphStore


class GraphAccessor:
    """Async facade over a GraphStore - the only reader of profiles, edges and requests."""

    def __init__(self, store: GraphStore) -> None:
        """Initialize with the backing store.

        Args:
            store: Blocking GraphStore implementation.
        """
        self.store = store

    # === Profiles ===

    async def profile(self, user_id: str) -> UserProfile | None:
        return await asyncio.to_thread(self.store.get_profile, user_id)

    async def profiles(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        """Fetch profiles and return them keyed by id."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        found = await asyncio.to_thread(self.store.get_profiles, ids)
        return {p.id: p for p in found}

    async def profiles_by_follower_range(self, min_followers: int, max_followers: int) -> list[UserProfile]:
        return await asyncio.to_thread(self.store.get_profiles_by_follower_range, min_followers, max_followers)

    async def recent_profiles(self, location: str | None = None) -> list[UserProfile]:
        return await asyncio.to_thread(self.store.get_recent_profiles, location)

    async def profiles_by_location(self, location: str) -> list[UserProfile]:
        return await asyncio.to_thread(self.store.get_profiles_by_location, location)

    async def search_profiles(self, query: str, location: str | None = None) -> list[UserProfile]:
        return await asyncio.to_thread(self.store.search_profiles, query, location)

    # === Edges ===

    async def following(self, user_id: str) -> set[str]:
        """Ids the user already follows."""
        return set(await asyncio.to_thread(self.store.get_following, user_id))

    async def two_hop_sources(self, following: Collection[str]) -> dict[str, set[str]]:
        """Map every two-hop neighbour to the followed users that point at it.

        Args:
            following: Ids the requesting user follows (the first hop).

        Returns:
            Dictionary mapping target id -> ids in ``following`` that follow it.
        """
        if not following:
            return {}
        edges = await asyncio.to_thread(self.store.get_edges_from, list(following))
        sources: dict[str, set[str]] = defaultdict(set)
        for edge in edges:
            if edge.follower_id in following:
                sources[edge.following_id].add(edge.follower_id)
        return dict(sources)

    async def mutual_connections(self, following: Collection[str], candidate_ids: Collection[str]) -> dict[str, set[str]]:
        """Restrict two-hop sources to the given candidates."""
        candidates = set(candidate_ids)
        sources = await self.two_hop_sources(following)
        return {target: via for target, via in sources.items() if target in candidates}

    # === Requests ===

    async def pending_outgoing(self, user_id: str) -> set[str]:
        """Ids the user has an active (pending) request toward."""
        requests = await asyncio.to_thread(self.store.get_requests_from, user_id, {RequestStatus.PENDING})
        return {r.target_id for r in requests}

    async def requests_with(self, user_id: str, candidate_ids: Collection[str]) -> list[ConnectionRequest]:
        """Requests in either direction between the user and any candidate."""
        if not candidate_ids:
            return []
        requests = await asyncio.to_thread(self.store.get_requests_between, {user_id, *candidate_ids})
        return [r for r in requests if (r.requester_id == user_id) != (r.target_id == user_id)]
