"""
Pydantic schemas for suggestion and search endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from circles.models import RequestRef, Suggestion, SuggestionPage, UserProfile


class ProfileSummary(BaseModel):
    """Compact profile used for mutual-friend samples"""

    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> ProfileSummary:
        return cls(
            id=profile.id,
            username=profile.username,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
        )


class RequestRefSchema(BaseModel):
    """Request attached to a suggestion"""

    id: str | None = None
    status: str  # 'pending', 'accepted', 'rejected'

    @classmethod
    def from_ref(cls, ref: RequestRef | None) -> RequestRefSchema | None:
        if ref is None:
            return None
        return cls(id=ref.id, status=ref.status.value)


class SuggestionSchema(BaseModel):
    """One suggested user"""

    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    is_verified: bool = False
    followers_count: int = 0
    following_count: int = 0
    created_at: datetime | None = None
    mutual_friends: list[ProfileSummary] = []
    mutual_count: int = 0
    relevance_score: float = 0.0
    outgoing_request: RequestRefSchema | None = None
    incoming_request: RequestRefSchema | None = None
    can_send_request: bool = True

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> SuggestionSchema:
        profile = suggestion.profile
        return cls(
            id=profile.id,
            username=profile.username,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
            bio=profile.bio,
            location=profile.location,
            is_verified=profile.is_verified,
            followers_count=profile.followers_count,
            following_count=profile.following_count,
            created_at=profile.created_at,
            mutual_friends=[ProfileSummary.from_profile(p) for p in suggestion.mutual_sample],
            mutual_count=suggestion.mutual_count,
            relevance_score=suggestion.relevance_score,
            outgoing_request=RequestRefSchema.from_ref(suggestion.outgoing_request),
            incoming_request=RequestRefSchema.from_ref(suggestion.incoming_request),
            can_send_request=suggestion.can_send_request,
        )


class SuggestionsResponse(BaseModel):
    """Paginated suggestions"""

    suggestions: list[SuggestionSchema]
    total_count: int
    has_more: bool
    algorithm_used: str

    @classmethod
    def from_page(cls, page: SuggestionPage) -> SuggestionsResponse:
        return cls(
            suggestions=[SuggestionSchema.from_suggestion(s) for s in page.suggestions],
            total_count=page.total_count,
            has_more=page.has_more,
            algorithm_used=page.algorithm_used.value,
        )


class SearchResponse(BaseModel):
    """Friend search results"""

    users: list[SuggestionSchema]
