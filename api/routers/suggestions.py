"""
Suggestions Router - Endpoints for connection suggestions and friend search.

This router handles:
- Paginated "people you may know" suggestions, one strategy per call
- Friend search by handle/name with mutual-connection annotations
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query

from circles.errors import GraphStoreError, InvalidParametersError
from circles.models import DEFAULT_MAX_FOLLOWERS, SuggestionAlgorithm, SuggestionParams

from ..dependencies import get_suggestion_engine
from ..schemas import SearchResponse, SuggestionSchema, SuggestionsResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["suggestions"])


def _parse_ids(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


# ========================================
# Suggestions Endpoint
# ========================================


@router.get("/api/users/{user_id}/suggestions")
async def get_user_suggestions(
    user_id: Annotated[str, Path(description="Requesting user ID")],
    limit: Annotated[int, Query(ge=1, le=100, description="Page size")] = 10,
    offset: Annotated[int, Query(ge=0, description="Results to skip")] = 0,
    exclude_ids: Annotated[str | None, Query(description="Comma-separated user IDs to exclude")] = None,
    include_mutual: Annotated[bool, Query(description="Attach mutual-connection data")] = True,
    algorithm: Annotated[SuggestionAlgorithm, Query(description="mutual, popularity, recency or proximity")] = (
        SuggestionAlgorithm.POPULARITY
    ),
    location: Annotated[str | None, Query(description="Location filter (recency/proximity)")] = None,
    min_followers: Annotated[int, Query(ge=0, description="Minimum follower count (popularity)")] = 0,
    max_followers: Annotated[int, Query(ge=0, description="Maximum follower count (popularity)")] = (
        DEFAULT_MAX_FOLLOWERS
    ),
) -> SuggestionsResponse:
    """Get ranked connection suggestions for a user.

    Args:
        user_id: The requesting user
        limit: Page size
        offset: Results to skip
        exclude_ids: Extra user IDs never to suggest
        include_mutual: Whether to run mutual-friend enrichment
        algorithm: Candidate generation strategy
        location: Location filter for recency and proximity
        min_followers: Lower follower bound for popularity
        max_followers: Upper follower bound for popularity

    Returns:
        One page of suggestions with total count and has_more
    """
    try:
        params = SuggestionParams(
            limit=limit,
            offset=offset,
            exclude_ids=_parse_ids(exclude_ids),
            include_mutual=include_mutual,
            algorithm=algorithm,
            location=location,
            min_followers=min_followers,
            max_followers=max_followers,
        )
    except InvalidParametersError as e:
        raise HTTPException(status_code=422, detail=str(e))

    engine = get_suggestion_engine()
    try:
        page = await engine.get_suggestions(user_id, params)
    except GraphStoreError as e:
        logger.error(f"Failed to build suggestions for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to load suggestions. Please try again.")

    return SuggestionsResponse.from_page(page)


# ========================================
# Friend Search Endpoint
# ========================================


@router.get("/api/users/{user_id}/search")
async def search_users(
    user_id: Annotated[str, Path(description="Searching user ID")],
    q: Annotated[str, Query(description="Handle or name substring")] = "",
    location: Annotated[str | None, Query(description="Location substring")] = None,
    mutual_only: Annotated[bool, Query(description="Only users sharing a connection")] = False,
    limit: Annotated[int, Query(ge=1, le=50, description="Maximum results")] = 20,
) -> SearchResponse:
    """Search for people by handle or name, annotated with mutual friends and request status."""
    engine = get_suggestion_engine()
    try:
        results = await engine.search(user_id, q, location=location, mutual_only=mutual_only, limit=limit)
    except GraphStoreError as e:
        logger.error(f"Search failed for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Search failed. Please try again.")

    return SearchResponse(users=[SuggestionSchema.from_suggestion(s) for s in results])
