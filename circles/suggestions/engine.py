"""Suggestion orchestrator - the public read path.

Flow for one call:
1. Resolve the exclusion set (fatal on failure)
2. Run the single selected generator (fatal on failure)
3. Enrich: mutual friends and request status, concurrently (degradable)
4. Score, sort and paginate

The path is read-only; any number of calls may run concurrently against the
same store without coordination.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from ..graph.accessor import GraphAccessor
from ..models import Candidate, Suggestion, SuggestionAlgorithm, SuggestionPage, SuggestionParams
from .enrichment import DEFAULT_MUTUAL_SAMPLE_SIZE, enrich_candidates
from .exclusions import resolve_exclusions
from .generators import DEFAULT_OVERFETCH, create_generator, eligible
from .scoring import paginate, rank

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20


class SuggestionEngine:
    """Ranked connection suggestions for one user at a time."""

    def __init__(
        self,
        accessor: GraphAccessor,
        mutual_sample_size: int = DEFAULT_MUTUAL_SAMPLE_SIZE,
        overfetch: int = DEFAULT_OVERFETCH,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            accessor: Graph accessor for all reads
            mutual_sample_size: Shared-connection profiles attached per suggestion
            overfetch: Mutual candidates generated per requested result
            clock: Source of "now" for recency scoring (defaults to UTC wall clock)
        """
        self.accessor = accessor
        self.mutual_sample_size = mutual_sample_size
        self.overfetch = overfetch
        self.clock = clock or (lambda: datetime.now(UTC))

    async def get_suggestions(self, user_id: str, params: SuggestionParams | None = None) -> SuggestionPage:
        """Build one page of suggestions for the user.

        Args:
            user_id: The requesting user
            params: Caller options; defaults to popularity, first 10 results

        Returns:
            SuggestionPage with the page, total candidate count, has_more and
            the strategy that actually ran

        Raises:
            GraphStoreError: exclusion resolution or candidate generation failed
        """
        params = params or SuggestionParams()
        start = time.perf_counter()

        exclusions = await resolve_exclusions(self.accessor, user_id, params.exclude_ids)

        generator = create_generator(params.algorithm, self.accessor, self.overfetch)
        params = await generator.prepare(user_id, params)
        if params.algorithm is not generator.algorithm:
            generator = create_generator(params.algorithm, self.accessor, self.overfetch)

        candidates = await generator.generate(user_id, exclusions, params.limit, params)
        # Generators already filter; this guards the invariant for any future strategy
        allowed = {p.id for p in eligible((c.profile for c in candidates), exclusions)}
        candidates = _dedupe([c for c in candidates if c.id in allowed])

        suggestions = await enrich_candidates(
            self.accessor,
            user_id,
            exclusions.following,
            candidates,
            include_mutual=params.include_mutual,
            sample_size=self.mutual_sample_size,
        )
        ranked = rank(candidates, suggestions, now=self.clock())
        page, has_more = paginate(ranked, params.offset, params.limit)

        logger.info(
            f"Suggestions for {user_id}: algorithm={params.algorithm.value}, candidates={len(ranked)}, "
            f"returned={len(page)}, offset={params.offset} in {time.perf_counter() - start:.3f}s"
        )
        return SuggestionPage(
            suggestions=page,
            total_count=len(ranked),
            has_more=has_more,
            algorithm_used=params.algorithm,
        )

    async def search(
        self,
        user_id: str,
        query: str,
        location: str | None = None,
        mutual_only: bool = False,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[Suggestion]:
        """Find people by handle or name, annotated like suggestions.

        Unlike suggestions, users already followed are included; only the
        requester and incomplete profiles are dropped.

        Args:
            user_id: The searching user
            query: Substring of handle or display name
            location: Optional location substring
            mutual_only: Keep only results sharing at least one connection
            limit: Maximum number of results

        Returns:
            Matches ordered by shared connections, then followers, then id
        """
        query = query.strip()
        location = (location or "").strip() or None
        if not query and not location and not mutual_only:
            return []

        following, matches = await asyncio.gather(
            self.accessor.following(user_id),
            self.accessor.search_profiles(query, location),
        )

        candidates = _dedupe(
            [
                Candidate(profile=p, base_score=0.0, strategy=SuggestionAlgorithm.POPULARITY)
                for p in matches
                if p.id != user_id and p.is_complete
            ]
        )
        suggestions = await enrich_candidates(
            self.accessor,
            user_id,
            following,
            candidates,
            include_mutual=True,
            sample_size=self.mutual_sample_size,
        )
        if mutual_only:
            suggestions = [s for s in suggestions if s.mutual_count > 0]

        suggestions.sort(key=lambda s: (-s.mutual_count, -s.profile.followers_count, s.id))
        logger.debug(f"Search by {user_id} for '{query}' matched {len(suggestions)} profiles")
        return suggestions[:limit]


def _dedupe(candidates: list[Candidate]) -> list[Candidate]:
    seen: set[str] = set()
    unique = []
    for candidate in candidates:
        if candidate.id not in seen:
            seen.add(candidate.id)
            unique.append(candidate)
    return unique
