"""Domain models for the connection suggestion engine.

Profiles, edges and requests mirror the stored records. Candidates and
suggestions are derived per call and never written back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .errors import InvalidParametersError

DEFAULT_MAX_FOLLOWERS = 1_000_000


class RequestStatus(Enum):
    """Status of a connection request

    Note: Values must match the connection_requests.status select options.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SuggestionAlgorithm(Enum):
    """Candidate generation strategies - exactly one is used per call"""

    MUTUAL = "mutual"
    POPULARITY = "popularity"
    RECENCY = "recency"
    PROXIMITY = "proximity"


@dataclass(frozen=True)
class UserProfile:
    """A user as stored by the profile store"""

    id: str
    username: str | None = None
    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    location: str | None = None
    is_verified: bool = False
    followers_count: int = 0
    following_count: int = 0
    created_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """Profiles without a display name or handle have not finished onboarding."""
        return bool((self.full_name or "").strip()) and bool((self.username or "").strip())

    def matches_location(self, location: str) -> bool:
        """Case-insensitive substring match on the profile location."""
        return bool(self.location) and location.strip().lower() in (self.location or "").lower()


@dataclass(frozen=True)
class ConnectionEdge:
    """Accepted, directed follow relationship"""

    follower_id: str
    following_id: str


@dataclass(frozen=True)
class ConnectionRequest:
    """A proposal to form an edge, pending or resolved"""

    requester_id: str
    target_id: str
    status: RequestStatus
    created_at: datetime | None = None
    id: str | None = None


@dataclass(frozen=True)
class RequestRef:
    """Reference to a request attached to a suggestion"""

    id: str | None
    status: RequestStatus

    @classmethod
    def from_request(cls, request: ConnectionRequest) -> RequestRef:
        return cls(id=request.id, status=request.status)


@dataclass
class Candidate:
    """A generated profile with its strategy-specific base score.

    ``mutual_count`` is only known at generation time for the mutual
    strategy; enrichment replaces it with the full count.
    """

    profile: UserProfile
    base_score: float
    strategy: SuggestionAlgorithm
    mutual_count: int = 0

    @property
    def id(self) -> str:
        return self.profile.id


@dataclass
class Suggestion:
    """A fully enriched, scored candidate ready for serialization"""

    profile: UserProfile
    mutual_count: int = 0
    mutual_sample: list[UserProfile] = field(default_factory=list)
    relevance_score: float = 0.0
    outgoing_request: RequestRef | None = None
    incoming_request: RequestRef | None = None

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def can_send_request(self) -> bool:
        """Any request in either direction, even a rejected one, blocks a new one."""
        return self.outgoing_request is None and self.incoming_request is None


@dataclass(frozen=True)
class SuggestionParams:
    """Caller options for a suggestion call"""

    limit: int = 10
    offset: int = 0
    exclude_ids: tuple[str, ...] = ()
    include_mutual: bool = True
    algorithm: SuggestionAlgorithm = SuggestionAlgorithm.POPULARITY
    location: str | None = None
    min_followers: int = 0
    max_followers: int = DEFAULT_MAX_FOLLOWERS

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise InvalidParametersError(f"limit must be at least 1, got {self.limit}")
        if self.offset < 0:
            raise InvalidParametersError(f"offset must not be negative, got {self.offset}")
        if self.min_followers < 0 or self.max_followers < self.min_followers:
            raise InvalidParametersError(
                f"Invalid follower range [{self.min_followers}, {self.max_followers}]"
            )
        # Accept any iterable of ids from callers
        object.__setattr__(self, "exclude_ids", tuple(self.exclude_ids))


@dataclass
class SuggestionPage:
    """Response envelope for a suggestion call"""

    suggestions: list[Suggestion]
    total_count: int
    has_more: bool
    algorithm_used: SuggestionAlgorithm
