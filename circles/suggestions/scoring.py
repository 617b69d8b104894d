"""Relevance scoring and ranking.

The score is composed explicitly from independent terms:

1. Strategy base score (assigned at generation)
2. Profile bonuses: verified, shared connections, bio, avatar
3. Strategy top-up: mutual (again), proximity, recency decay

The mutual strategy deliberately collects shared-connection weight three
times: its base score, the unconditional mutual bonus and its top-up.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from ..logging_config import TRACE
from ..models import Candidate, Suggestion, SuggestionAlgorithm, UserProfile

logger = logging.getLogger(__name__)

VERIFIED_BONUS = 5.0
MUTUAL_BONUS_PER_CONNECTION = 15.0
BIO_BONUS = 2.0
BIO_MIN_LENGTH = 10
AVATAR_BONUS = 1.0

MUTUAL_TOP_UP_PER_CONNECTION = 20.0
PROXIMITY_TOP_UP = 10.0
RECENCY_WINDOW_DAYS = 30


def days_since(created_at: datetime | None, now: datetime) -> int | None:
    """Whole days between account creation and now; None when unknown.

    Creation times in the future (clock skew) count as zero days old.
    """
    if created_at is None:
        return None
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return max(0, (now - created_at).days)


def profile_bonus(profile: UserProfile, mutual_count: int) -> float:
    """Strategy-independent bonuses."""
    bonus = 0.0
    if profile.is_verified:
        bonus += VERIFIED_BONUS
    if mutual_count > 0:
        bonus += mutual_count * MUTUAL_BONUS_PER_CONNECTION
    if len(profile.bio or "") > BIO_MIN_LENGTH:
        bonus += BIO_BONUS
    if profile.avatar_url:
        bonus += AVATAR_BONUS
    return bonus


def strategy_top_up(strategy: SuggestionAlgorithm, profile: UserProfile, mutual_count: int, now: datetime) -> float:
    """Per-strategy adjustment applied once on top of everything else."""
    if strategy is SuggestionAlgorithm.MUTUAL:
        return mutual_count * MUTUAL_TOP_UP_PER_CONNECTION
    if strategy is SuggestionAlgorithm.PROXIMITY:
        return PROXIMITY_TOP_UP
    if strategy is SuggestionAlgorithm.RECENCY:
        age = days_since(profile.created_at, now)
        return float(max(0, RECENCY_WINDOW_DAYS - age)) if age is not None else 0.0
    return 0.0


def score(candidate: Candidate, mutual_count: int, now: datetime) -> float:
    """Compute the final relevance score for one candidate.

    Args:
        candidate: Generated candidate (profile, base score, strategy)
        mutual_count: Shared connection count after enrichment
        now: Reference time for the recency decay

    Returns:
        Score, never below 0
    """
    total = (
        candidate.base_score
        + profile_bonus(candidate.profile, mutual_count)
        + strategy_top_up(candidate.strategy, candidate.profile, mutual_count, now)
    )
    return max(0.0, total)


def rank(
    candidates: Sequence[Candidate],
    suggestions: Sequence[Suggestion],
    now: datetime | None = None,
) -> list[Suggestion]:
    """Score suggestions and sort them, highest first, ties by id.

    Args:
        candidates: Generated candidates
        suggestions: Enriched suggestions, aligned with ``candidates``
        now: Reference time (defaults to the current UTC time)

    Returns:
        New list of suggestions with relevance_score set
    """
    if len(candidates) != len(suggestions):
        raise ValueError(f"Got {len(candidates)} candidates for {len(suggestions)} suggestions")

    now = now or datetime.now(UTC)
    for candidate, suggestion in zip(candidates, suggestions, strict=True):
        suggestion.relevance_score = score(candidate, suggestion.mutual_count, now)
        logger.log(TRACE, f"Scored {suggestion.id}: {suggestion.relevance_score:.1f} ({candidate.strategy.value})")

    return sorted(suggestions, key=lambda s: (-s.relevance_score, s.id))


def paginate(ranked: Sequence[Suggestion], offset: int, limit: int) -> tuple[list[Suggestion], bool]:
    """Slice one page and report whether more results follow it."""
    return list(ranked[offset : offset + limit]), len(ranked) > offset + limit
