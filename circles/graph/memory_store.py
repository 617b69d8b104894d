"""
In-memory graph store backed by NetworkX.

Used for local development (GRAPH_BACKEND=memory) and as the store behind
the test suite. Thread-safe: every read and write holds one re-entrant lock,
which is also what enforces request uniqueness.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Collection, Iterable
from datetime import UTC, datetime

import networkx as nx

from ..errors import DuplicateRequestError
from ..models import ConnectionEdge, ConnectionRequest, RequestStatus, UserProfile
from .store import ACTIVE_OR_TERMINAL, GraphStore

logger = logging.getLogger(__name__)


def _newest_first_key(profile: UserProfile) -> tuple[bool, float, str]:
    created = profile.created_at.timestamp() if profile.created_at else 0.0
    return (profile.created_at is None, -created, profile.id)


class InMemoryGraphStore(GraphStore):
    """Follow edges in an ``nx.DiGraph``; profiles and requests in dicts."""

    def __init__(self) -> None:
        self.graph = nx.DiGraph()
        self._profiles: dict[str, UserProfile] = {}
        self._requests: dict[tuple[str, str], ConnectionRequest] = {}
        self._request_ids = itertools.count(1)
        self._lock = threading.RLock()

    # ========================================
    # Seeding helpers
    # ========================================

    def add_profile(self, profile: UserProfile) -> None:
        with self._lock:
            self._profiles[profile.id] = profile
            self.graph.add_node(profile.id)

    def add_profiles(self, profiles: Iterable[UserProfile]) -> None:
        for profile in profiles:
            self.add_profile(profile)

    def add_request(
        self,
        requester_id: str,
        target_id: str,
        status: RequestStatus = RequestStatus.PENDING,
    ) -> ConnectionRequest:
        """Seed a request in any status (bypasses the writer's preconditions)."""
        with self._lock:
            request = self._new_request(requester_id, target_id, status)
            self._requests[(requester_id, target_id)] = request
            return request

    def _new_request(self, requester_id: str, target_id: str, status: RequestStatus) -> ConnectionRequest:
        return ConnectionRequest(
            requester_id=requester_id,
            target_id=target_id,
            status=status,
            created_at=datetime.now(UTC),
            id=f"req_{next(self._request_ids)}",
        )

    # ========================================
    # Profiles
    # ========================================

    def get_profile(self, user_id: str) -> UserProfile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def get_profiles(self, user_ids: Iterable[str]) -> list[UserProfile]:
        with self._lock:
            return [self._profiles[uid] for uid in dict.fromkeys(user_ids) if uid in self._profiles]

    def get_profiles_by_follower_range(self, min_followers: int, max_followers: int) -> list[UserProfile]:
        with self._lock:
            matches = [p for p in self._profiles.values() if min_followers <= p.followers_count <= max_followers]
        return sorted(matches, key=lambda p: (-p.followers_count, p.id))

    def get_recent_profiles(self, location: str | None = None) -> list[UserProfile]:
        with self._lock:
            profiles = list(self._profiles.values())
        if location:
            profiles = [p for p in profiles if p.matches_location(location)]
        return sorted(profiles, key=_newest_first_key)

    def get_profiles_by_location(self, location: str) -> list[UserProfile]:
        with self._lock:
            matches = [p for p in self._profiles.values() if p.matches_location(location)]
        return sorted(matches, key=lambda p: (-p.followers_count, p.id))

    def search_profiles(self, query: str, location: str | None = None) -> list[UserProfile]:
        needle = query.strip().lower()
        with self._lock:
            profiles = list(self._profiles.values())
        results = []
        for profile in profiles:
            if needle and needle not in (profile.username or "").lower() and needle not in (profile.full_name or "").lower():
                continue
            if location and not profile.matches_location(location):
                continue
            results.append(profile)
        return sorted(results, key=lambda p: p.id)

    # ========================================
    # Edges
    # ========================================

    def get_following(self, user_id: str) -> list[str]:
        with self._lock:
            if user_id not in self.graph:
                return []
            return sorted(self.graph.successors(user_id))

    def get_followers(self, user_id: str) -> list[str]:
        with self._lock:
            if user_id not in self.graph:
                return []
            return sorted(self.graph.predecessors(user_id))

    def edge_exists(self, follower_id: str, following_id: str) -> bool:
        with self._lock:
            return bool(self.graph.has_edge(follower_id, following_id))

    def get_edges_from(self, source_ids: Iterable[str]) -> list[ConnectionEdge]:
        with self._lock:
            sources = [s for s in dict.fromkeys(source_ids) if s in self.graph]
            return [ConnectionEdge(follower_id=u, following_id=v) for u, v in self.graph.out_edges(sources)]

    def create_edge(self, follower_id: str, following_id: str) -> bool:
        with self._lock:
            if self.graph.has_edge(follower_id, following_id):
                return False
            self.graph.add_edge(follower_id, following_id)
            return True

    # ========================================
    # Requests
    # ========================================

    def get_requests_between(self, user_ids: Collection[str]) -> list[ConnectionRequest]:
        ids = set(user_ids)
        with self._lock:
            return [
                r
                for (requester, target), r in self._requests.items()
                if requester in ids and target in ids and r.status in ACTIVE_OR_TERMINAL
            ]

    def get_requests_from(
        self, requester_id: str, statuses: Collection[RequestStatus] = ACTIVE_OR_TERMINAL
    ) -> list[ConnectionRequest]:
        with self._lock:
            return [
                r for (requester, _), r in self._requests.items() if requester == requester_id and r.status in statuses
            ]

    def insert_pending_request(self, requester_id: str, target_id: str) -> ConnectionRequest:
        with self._lock:
            key = (requester_id, target_id)
            if key in self._requests:
                raise DuplicateRequestError(requester_id, target_id)
            request = self._new_request(requester_id, target_id, RequestStatus.PENDING)
            self._requests[key] = request
            return request

    def set_request_status(
        self,
        requester_id: str,
        target_id: str,
        expected: RequestStatus,
        new: RequestStatus,
    ) -> bool:
        with self._lock:
            current = self._requests.get((requester_id, target_id))
            if current is None or current.status is not expected:
                return False
            self._requests[(requester_id, target_id)] = ConnectionRequest(
                requester_id=requester_id,
                target_id=target_id,
                status=new,
                created_at=current.created_at,
                id=current.id,
            )
            return True

    def delete_request(self, requester_id: str, target_id: str) -> bool:
        with self._lock:
            return self._requests.pop((requester_id, target_id), None) is not None
