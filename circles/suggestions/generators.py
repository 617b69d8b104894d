"""Candidate generation strategies.

Each strategy produces (profile, base score) candidates for one requesting
user. Strategies differ only in where candidates come from and how the base
score is assigned; ranking happens later in scoring.

Shared policy: excluded ids and incomplete profiles (no display name or
handle) are never returned by any strategy.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import replace

from ..graph.accessor import GraphAccessor
from ..models import Candidate, SuggestionAlgorithm, SuggestionParams, UserProfile
from .exclusions import ExclusionSet

logger = logging.getLogger(__name__)

# Base scores
MUTUAL_BASE_PER_CONNECTION = 10.0
POPULARITY_BASE_PER_FOLLOWER = 0.1
RECENCY_BASE_SCORE = 5.0
PROXIMITY_BASE_SCORE = 8.0

# Mutual candidates fetched per requested slot, to survive later pruning
DEFAULT_OVERFETCH = 3


def eligible(profiles: Iterable[UserProfile], exclusions: ExclusionSet) -> list[UserProfile]:
    """Drop excluded and not-yet-onboarded profiles."""
    return [p for p in profiles if p.id not in exclusions and p.is_complete]


def _by_followers(profile: UserProfile) -> tuple[int, str]:
    return (-profile.followers_count, profile.id)


def _by_newest(profile: UserProfile) -> tuple[bool, float, str]:
    created = profile.created_at.timestamp() if profile.created_at else 0.0
    return (profile.created_at is None, -created, profile.id)


class CandidateGenerator(ABC):
    """Base class for candidate generation strategies"""

    algorithm: SuggestionAlgorithm

    def __init__(self, accessor: GraphAccessor, overfetch: int = DEFAULT_OVERFETCH):
        """Initialize the generator.

        Args:
            accessor: Graph accessor for profile and edge reads
            overfetch: Multiplier applied to the requested limit
        """
        self.accessor = accessor
        self.overfetch = max(1, overfetch)

    @property
    def name(self) -> str:
        """Strategy name for logging"""
        return self.algorithm.value

    def pool_size(self, limit: int) -> int:
        return limit * self.overfetch

    async def prepare(self, user_id: str, params: SuggestionParams) -> SuggestionParams:
        """Resolve strategy inputs before generation. Default: unchanged."""
        return params

    @abstractmethod
    async def generate(
        self,
        user_id: str,
        exclusions: ExclusionSet,
        limit: int,
        params: SuggestionParams,
    ) -> list[Candidate]:
        """Produce candidates for the user.

        Args:
            user_id: The requesting user
            exclusions: Ids that must not be returned
            limit: Page size requested by the caller
            params: Caller options (location, follower range, ...)

        Returns:
            Candidates in strategy order; only the mutual strategy caps the
            list (at ``pool_size(limit)``), the rest return every eligible profile
        """
        pass


class MutualGenerator(CandidateGenerator):
    """Two-hop neighbours ranked by how many of the user's connections follow them."""

    algorithm = SuggestionAlgorithm.MUTUAL

    async def generate(
        self,
        user_id: str,
        exclusions: ExclusionSet,
        limit: int,
        params: SuggestionParams,
    ) -> list[Candidate]:
        sources = await self.accessor.two_hop_sources(exclusions.following)
        fan_in = {target: len(via) for target, via in sources.items() if target not in exclusions}
        ranked = sorted(fan_in.items(), key=lambda item: (-item[1], item[0]))[: self.pool_size(limit)]

        profiles = await self.accessor.profiles(target for target, _ in ranked)
        candidates = []
        for target, count in ranked:
            profile = profiles.get(target)
            if profile is None or not profile.is_complete:
                continue
            candidates.append(
                Candidate(
                    profile=profile,
                    base_score=count * MUTUAL_BASE_PER_CONNECTION,
                    strategy=self.algorithm,
                    mutual_count=count,
                )
            )

        logger.debug(f"Mutual strategy: {len(fan_in)} two-hop neighbours, {len(candidates)} candidates for {user_id}")
        return candidates


class PopularityGenerator(CandidateGenerator):
    """Profiles within a follower-count range, most followed first."""

    algorithm = SuggestionAlgorithm.POPULARITY

    async def generate(
        self,
        user_id: str,
        exclusions: ExclusionSet,
        limit: int,
        params: SuggestionParams,
    ) -> list[Candidate]:
        profiles = await self.accessor.profiles_by_follower_range(params.min_followers, params.max_followers)
        in_range = [p for p in profiles if params.min_followers <= p.followers_count <= params.max_followers]
        ranked = sorted(eligible(in_range, exclusions), key=_by_followers)
        return [
            Candidate(profile=p, base_score=p.followers_count * POPULARITY_BASE_PER_FOLLOWER, strategy=self.algorithm)
            for p in ranked
        ]


class RecencyGenerator(CandidateGenerator):
    """Newest accounts first; the freshness bonus is applied in scoring."""

    algorithm = SuggestionAlgorithm.RECENCY

    async def generate(
        self,
        user_id: str,
        exclusions: ExclusionSet,
        limit: int,
        params: SuggestionParams,
    ) -> list[Candidate]:
        location = (params.location or "").strip() or None
        profiles = await self.accessor.recent_profiles(location)
        if location:
            profiles = [p for p in profiles if p.matches_location(location)]
        ranked = sorted(eligible(profiles, exclusions), key=_by_newest)
        return [Candidate(profile=p, base_score=RECENCY_BASE_SCORE, strategy=self.algorithm) for p in ranked]


class ProximityGenerator(CandidateGenerator):
    """Profiles sharing the requested (or the user's own) location.

    With no location available, prepare() switches the request over to the
    popularity strategy; generate() itself only ever searches by location.
    """

    algorithm = SuggestionAlgorithm.PROXIMITY

    async def prepare(self, user_id: str, params: SuggestionParams) -> SuggestionParams:
        if (params.location or "").strip():
            return params

        profile = await self.accessor.profile(user_id)
        if profile and (profile.location or "").strip():
            return replace(params, location=profile.location)

        logger.info(f"No location for {user_id}, falling back to popularity suggestions")
        return replace(params, algorithm=SuggestionAlgorithm.POPULARITY)

    async def generate(
        self,
        user_id: str,
        exclusions: ExclusionSet,
        limit: int,
        params: SuggestionParams,
    ) -> list[Candidate]:
        location = (params.location or "").strip()
        if not location:
            return []
        profiles = await self.accessor.profiles_by_location(location)
        nearby = [p for p in profiles if p.matches_location(location)]
        ranked = sorted(eligible(nearby, exclusions), key=_by_followers)
        return [Candidate(profile=p, base_score=PROXIMITY_BASE_SCORE, strategy=self.algorithm) for p in ranked]


GENERATORS: dict[SuggestionAlgorithm, type[CandidateGenerator]] = {
    SuggestionAlgorithm.MUTUAL: MutualGenerator,
    SuggestionAlgorithm.POPULARITY: PopularityGenerator,
    SuggestionAlgorithm.RECENCY: RecencyGenerator,
    SuggestionAlgorithm.PROXIMITY: ProximityGenerator,
}

_missing = set(SuggestionAlgorithm) - GENERATORS.keys()
if _missing:
    raise RuntimeError(f"No generator registered for: {sorted(a.value for a in _missing)}")


def create_generator(
    algorithm: SuggestionAlgorithm,
    accessor: GraphAccessor,
    overfetch: int = DEFAULT_OVERFETCH,
) -> CandidateGenerator:
    """Instantiate the generator for a strategy."""
    return GENERATORS[algorithm](accessor, overfetch)
