"""Exclusion-set resolution.

The set is read once per suggestion call and used as a snapshot. A failed
lookup propagates: an incomplete set could surface users already followed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..graph.accessor import GraphAccessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExclusionSet:
    """Ids that must never be suggested in one call"""

    user_id: str
    following: frozenset[str]
    pending_outgoing: frozenset[str]
    extra: frozenset[str]

    @property
    def ids(self) -> frozenset[str]:
        return frozenset({self.user_id}) | self.following | self.pending_outgoing | self.extra

    def __contains__(self, user_id: object) -> bool:
        return (
            user_id == self.user_id
            or user_id in self.following
            or user_id in self.pending_outgoing
            or user_id in self.extra
        )

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)


async def resolve_exclusions(
    accessor: GraphAccessor,
    user_id: str,
    extra_ids: Iterable[str] = (),
) -> ExclusionSet:
    """Build the exclusion set for a suggestion call.

    Args:
        accessor: Graph accessor for edge and request lookups
        user_id: The requesting user
        extra_ids: Caller-supplied ids to exclude

    Returns:
        ExclusionSet with the user, followed ids, pending-requested ids and extras

    Raises:
        GraphStoreError: if either lookup fails
    """
    following, pending = await asyncio.gather(
        accessor.following(user_id),
        accessor.pending_outgoing(user_id),
    )
    exclusions = ExclusionSet(
        user_id=user_id,
        following=frozenset(following),
        pending_outgoing=frozenset(pending),
        extra=frozenset(i for i in extra_ids if i),
    )
    logger.debug(
        f"Exclusions for {user_id}: {len(exclusions.following)} following, "
        f"{len(exclusions.pending_outgoing)} pending, {len(exclusions.extra)} caller-supplied"
    )
    return exclusions
