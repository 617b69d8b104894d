"""Storage contract consumed by the suggestion engine.

The profile, edge and request stores live outside this package. Any backend
that implements ``GraphStore`` can sit behind the engine; the two shipped
here are PocketBase and an in-memory NetworkX graph.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable

from ..models import ConnectionEdge, ConnectionRequest, RequestStatus, UserProfile

# Statuses that count as "a request exists" for suppression purposes
ACTIVE_OR_TERMINAL = frozenset({RequestStatus.PENDING, RequestStatus.ACCEPTED, RequestStatus.REJECTED})


class GraphStore(ABC):
    """Blocking access to profiles, follow edges and connection requests.

    Implementations raise ``GraphStoreError`` when a query fails and
    ``DuplicateRequestError`` when a request insert violates uniqueness.
    """

    # === Profiles ===

    @abstractmethod
    def get_profile(self, user_id: str) -> UserProfile | None:
        """Get one profile, or None if it does not exist"""
        pass

    @abstractmethod
    def get_profiles(self, user_ids: Iterable[str]) -> list[UserProfile]:
        """Get profiles for the given ids; unknown ids are skipped"""
        pass

    @abstractmethod
    def get_profiles_by_follower_range(self, min_followers: int, max_followers: int) -> list[UserProfile]:
        """Get profiles whose follower count lies in the inclusive range"""
        pass

    @abstractmethod
    def get_recent_profiles(self, location: str | None = None) -> list[UserProfile]:
        """Get profiles, newest first, optionally filtered by location substring"""
        pass

    @abstractmethod
    def get_profiles_by_location(self, location: str) -> list[UserProfile]:
        """Get profiles whose location contains the given substring"""
        pass

    @abstractmethod
    def search_profiles(self, query: str, location: str | None = None) -> list[UserProfile]:
        """Get profiles whose handle or display name contains the query"""
        pass

    # === Edges ===

    @abstractmethod
    def get_following(self, user_id: str) -> list[str]:
        """Ids the user follows"""
        pass

    @abstractmethod
    def get_followers(self, user_id: str) -> list[str]:
        """Ids following the user"""
        pass

    @abstractmethod
    def edge_exists(self, follower_id: str, following_id: str) -> bool:
        pass

    @abstractmethod
    def get_edges_from(self, source_ids: Iterable[str]) -> list[ConnectionEdge]:
        """All edges whose follower is one of the given ids"""
        pass

    @abstractmethod
    def create_edge(self, follower_id: str, following_id: str) -> bool:
        """Create a follow edge; returns False if it already existed"""
        pass

    # === Requests ===

    @abstractmethod
    def get_requests_between(self, user_ids: Collection[str]) -> list[ConnectionRequest]:
        """Active or terminal requests whose requester and target are both in user_ids"""
        pass

    @abstractmethod
    def get_requests_from(
        self, requester_id: str, statuses: Collection[RequestStatus] = ACTIVE_OR_TERMINAL
    ) -> list[ConnectionRequest]:
        """Requests sent by the user, restricted to the given statuses"""
        pass

    @abstractmethod
    def insert_pending_request(self, requester_id: str, target_id: str) -> ConnectionRequest:
        """Insert a pending request.

        Raises:
            DuplicateRequestError: a request row for this ordered pair already exists
        """
        pass

    @abstractmethod
    def set_request_status(
        self,
        requester_id: str,
        target_id: str,
        expected: RequestStatus,
        new: RequestStatus,
    ) -> bool:
        """Move a request from ``expected`` to ``new``; False if it was not in ``expected``"""
        pass

    @abstractmethod
    def delete_request(self, requester_id: str, target_id: str) -> bool:
        """Delete the request row for the ordered pair; False if there was none"""
        pass
