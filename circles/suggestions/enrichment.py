"""Enrichment of generated candidates.

Two independent passes run concurrently once the candidate batch is fixed:
- mutual-friend counts and a small sample of the shared connections
- request status (outgoing/incoming) relative to the requesting user

A failing pass degrades to "no data" and is logged; it never fails the call.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Collection, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from ..graph.accessor import GraphAccessor
from ..models import Candidate, RequestRef, Suggestion, UserProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MUTUAL_SAMPLE_SIZE = 3


@dataclass
class MutualInfo:
    """Shared connections between the requesting user and one candidate"""

    count: int
    sample: list[UserProfile] = field(default_factory=list)


@dataclass
class RequestInfo:
    """Requests between the requesting user and one candidate"""

    outgoing: RequestRef | None = None
    incoming: RequestRef | None = None


async def load_mutual_info(
    accessor: GraphAccessor,
    following: Collection[str],
    candidate_ids: Collection[str],
    sample_size: int = DEFAULT_MUTUAL_SAMPLE_SIZE,
) -> dict[str, MutualInfo]:
    """Count shared connections per candidate and sample a few of them.

    Args:
        accessor: Graph accessor
        following: Ids the requesting user follows
        candidate_ids: Candidates to enrich
        sample_size: Maximum number of sample profiles per candidate

    Returns:
        Dictionary mapping candidate id -> MutualInfo; candidates without
        shared connections are absent
    """
    if not following or not candidate_ids:
        return {}

    via = await accessor.mutual_connections(following, candidate_ids)
    sample_ids = {cid: sorted(sources)[:sample_size] for cid, sources in via.items()}
    profiles = await accessor.profiles(uid for ids in sample_ids.values() for uid in ids)

    return {
        cid: MutualInfo(
            count=len(via[cid]),
            sample=[profiles[uid] for uid in ids if uid in profiles],
        )
        for cid, ids in sample_ids.items()
    }


async def load_request_info(
    accessor: GraphAccessor,
    user_id: str,
    candidate_ids: Collection[str],
) -> dict[str, RequestInfo]:
    """Find pending, accepted or rejected requests in either direction.

    Returns:
        Dictionary mapping candidate id -> RequestInfo; candidates with no
        request in either direction are absent
    """
    if not candidate_ids:
        return {}

    info: dict[str, RequestInfo] = {}
    for request in await accessor.requests_with(user_id, candidate_ids):
        if request.requester_id == user_id:
            info.setdefault(request.target_id, RequestInfo()).outgoing = RequestRef.from_request(request)
        else:
            info.setdefault(request.requester_id, RequestInfo()).incoming = RequestRef.from_request(request)
    return info


async def _degrade(pass_name: str, user_id: str, coro: Awaitable[dict[str, T]]) -> dict[str, T]:
    try:
        return await coro
    except Exception as e:
        logger.warning(f"{pass_name} enrichment failed for {user_id}, continuing without it: {e}")
        return {}


async def enrich_candidates(
    accessor: GraphAccessor,
    user_id: str,
    following: Collection[str],
    candidates: Sequence[Candidate],
    include_mutual: bool = True,
    sample_size: int = DEFAULT_MUTUAL_SAMPLE_SIZE,
) -> list[Suggestion]:
    """Turn candidates into unscored suggestions.

    Args:
        accessor: Graph accessor
        user_id: The requesting user
        following: Ids the requesting user follows
        candidates: Generated candidates
        include_mutual: Run the mutual-friend pass
        sample_size: Mutual sample cap per candidate

    Returns:
        Suggestions in candidate order, relevance_score still 0
    """
    if not candidates:
        return []

    candidate_ids = [c.id for c in candidates]

    async def _no_mutual() -> dict[str, MutualInfo]:
        return {}

    mutual_pass = load_mutual_info(accessor, following, candidate_ids, sample_size) if include_mutual else _no_mutual()
    mutual, requests = await asyncio.gather(
        _degrade("Mutual-friend", user_id, mutual_pass),
        _degrade("Request-status", user_id, load_request_info(accessor, user_id, candidate_ids)),
    )

    suggestions = []
    for candidate in candidates:
        mutual_info = mutual.get(candidate.id)
        request_info = requests.get(candidate.id) or RequestInfo()
        suggestions.append(
            Suggestion(
                profile=candidate.profile,
                mutual_count=mutual_info.count if mutual_info else candidate.mutual_count,
                mutual_sample=mutual_info.sample if mutual_info else [],
                outgoing_request=request_info.outgoing,
                incoming_request=request_info.incoming,
            )
        )
    return suggestions
