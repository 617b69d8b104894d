"""PocketBase-backed graph store.

Collections:
- profiles: username, full_name, bio, avatar_url, location, is_verified,
  followers_count, following_count (created is the system field)
- connections: follower_id, following_id (unique index on the pair)
- connection_requests: requester_id, target_id, status (unique index on the pair)

Every SDK failure is translated to GraphStoreError at this boundary. A unique
index violation on connection_requests becomes DuplicateRequestError so the
writer can treat a lost race as "request already existed".
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable
from datetime import datetime
from typing import Any, TypeVar

from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from pocketbase import PocketBase

from ..errors import DuplicateRequestError, GraphStoreError
from ..logging_config import TRACE
from ..models import ConnectionEdge, ConnectionRequest, RequestStatus, UserProfile
from .store import ACTIVE_OR_TERMINAL, GraphStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROFILES = "profiles"
CONNECTIONS = "connections"
CONNECTION_REQUESTS = "connection_requests"


def _escape_filter_value(value: str) -> str:
    """Escape a string value for use in PocketBase filter queries.

    Single quotes are doubled to prevent filter injection (O'Brien -> O''Brien).
    """
    return value.replace("'", "''")


def _any_of(field: str, values: Iterable[str]) -> str:
    return "(" + " || ".join(f"{field} = '{_escape_filter_value(v)}'" for v in values) + ")"


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable timestamp from PocketBase: {value!r}")
        return None


def _is_unique_violation(error: ClientResponseError) -> bool:
    return getattr(error, "status", None) == 400 and "validation_not_unique" in str(getattr(error, "data", ""))


class PocketBaseGraphStore(GraphStore):
    """GraphStore over the PocketBase REST API"""

    # Ids per filter to avoid overly long query strings
    BATCH_SIZE = 100

    def __init__(self, pb: PocketBase) -> None:
        """Initialize with PocketBase client.

        Args:
            pb: Authenticated PocketBase client instance.
        """
        self.pb = pb

    # ========================================
    # Record mapping
    # ========================================

    @staticmethod
    def _map_profile(record: Any) -> UserProfile:
        return UserProfile(
            id=record.id,
            username=getattr(record, "username", None) or None,
            full_name=getattr(record, "full_name", None) or None,
            bio=getattr(record, "bio", None) or None,
            avatar_url=getattr(record, "avatar_url", None) or None,
            location=getattr(record, "location", None) or None,
            is_verified=bool(getattr(record, "is_verified", False)),
            followers_count=int(getattr(record, "followers_count", 0) or 0),
            following_count=int(getattr(record, "following_count", 0) or 0),
            created_at=_parse_datetime(getattr(record, "created", None)),
        )

    @staticmethod
    def _map_request(record: Any) -> ConnectionRequest:
        return ConnectionRequest(
            requester_id=record.requester_id,
            target_id=record.target_id,
            status=RequestStatus(record.status),
            created_at=_parse_datetime(getattr(record, "created", None)),
            id=record.id,
        )

    # ========================================
    # Query helpers
    # ========================================

    def _call(self, description: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except ClientResponseError as e:
            logger.error(f"PocketBase error while {description}: status={e.status}, data={getattr(e, 'data', None)}")
            raise GraphStoreError(f"Failed {description}: {e}") from e

    def _full_list(self, collection: str, filter_str: str | None = None, sort: str | None = None) -> list[Any]:
        query_params: dict[str, Any] = {}
        if filter_str:
            query_params["filter"] = filter_str
        if sort:
            query_params["sort"] = sort
        logger.log(TRACE, f"get_full_list {collection} with params: {query_params}")
        return self._call(
            f"listing {collection}",
            lambda: self.pb.collection(collection).get_full_list(query_params=query_params),
        )

    def _batched(self, collection: str, field: str, values: Iterable[str], extra: str | None = None) -> list[Any]:
        ids = list(dict.fromkeys(values))
        records: list[Any] = []
        for i in range(0, len(ids), self.BATCH_SIZE):
            filter_str = _any_of(field, ids[i : i + self.BATCH_SIZE])
            if extra:
                filter_str = f"{filter_str} && ({extra})"
            records.extend(self._full_list(collection, filter_str))
        return records

    def _first(self, collection: str, filter_str: str) -> Any | None:
        result = self._call(
            f"querying {collection}",
            lambda: self.pb.collection(collection).get_list(1, 1, query_params={"filter": filter_str}),
        )
        return result.items[0] if result.items else None

    @staticmethod
    def _pair_filter(requester_id: str, target_id: str) -> str:
        return (
            f"requester_id = '{_escape_filter_value(requester_id)}' && "
            f"target_id = '{_escape_filter_value(target_id)}'"
        )

    # ========================================
    # Profiles
    # ========================================

    def get_profile(self, user_id: str) -> UserProfile | None:
        try:
            record = self.pb.collection(PROFILES).get_one(user_id)
        except ClientResponseError as e:
            if e.status == 404:
                return None
            logger.error(f"PocketBase error fetching profile {user_id}: status={e.status}")
            raise GraphStoreError(f"Failed fetching profile {user_id}: {e}") from e
        return self._map_profile(record)

    def get_profiles(self, user_ids: Iterable[str]) -> list[UserProfile]:
        return [self._map_profile(r) for r in self._batched(PROFILES, "id", user_ids)]

    def get_profiles_by_follower_range(self, min_followers: int, max_followers: int) -> list[UserProfile]:
        records = self._full_list(
            PROFILES,
            f"followers_count >= {int(min_followers)} && followers_count <= {int(max_followers)}",
            sort="-followers_count,id",
        )
        return [self._map_profile(r) for r in records]

    def get_recent_profiles(self, location: str | None = None) -> list[UserProfile]:
        filter_str = f"location ~ '{_escape_filter_value(location.strip())}'" if location else None
        records = self._full_list(PROFILES, filter_str, sort="-created,id")
        return [self._map_profile(r) for r in records]

    def get_profiles_by_location(self, location: str) -> list[UserProfile]:
        records = self._full_list(
            PROFILES,
            f"location ~ '{_escape_filter_value(location.strip())}'",
            sort="-followers_count,id",
        )
        return [self._map_profile(r) for r in records]

    def search_profiles(self, query: str, location: str | None = None) -> list[UserProfile]:
        filter_parts = []
        needle = _escape_filter_value(query.strip())
        if needle:
            filter_parts.append(f"(username ~ '{needle}' || full_name ~ '{needle}')")
        if location:
            filter_parts.append(f"location ~ '{_escape_filter_value(location.strip())}'")
        records = self._full_list(PROFILES, " && ".join(filter_parts) or None, sort="id")
        return [self._map_profile(r) for r in records]

    # ========================================
    # Edges
    # ========================================

    def get_following(self, user_id: str) -> list[str]:
        records = self._full_list(CONNECTIONS, f"follower_id = '{_escape_filter_value(user_id)}'")
        return sorted(r.following_id for r in records)

    def get_followers(self, user_id: str) -> list[str]:
        records = self._full_list(CONNECTIONS, f"following_id = '{_escape_filter_value(user_id)}'")
        return sorted(r.follower_id for r in records)

    def edge_exists(self, follower_id: str, following_id: str) -> bool:
        filter_str = (
            f"follower_id = '{_escape_filter_value(follower_id)}' && "
            f"following_id = '{_escape_filter_value(following_id)}'"
        )
        return self._first(CONNECTIONS, filter_str) is not None

    def get_edges_from(self, source_ids: Iterable[str]) -> list[ConnectionEdge]:
        return [
            ConnectionEdge(follower_id=r.follower_id, following_id=r.following_id)
            for r in self._batched(CONNECTIONS, "follower_id", source_ids)
        ]

    def create_edge(self, follower_id: str, following_id: str) -> bool:
        try:
            self.pb.collection(CONNECTIONS).create({"follower_id": follower_id, "following_id": following_id})
        except ClientResponseError as e:
            if _is_unique_violation(e):
                return False
            raise GraphStoreError(f"Failed creating edge {follower_id} -> {following_id}: {e}") from e
        return True

    # ========================================
    # Requests
    # ========================================

    def get_requests_between(self, user_ids: Collection[str]) -> list[ConnectionRequest]:
        ids = set(user_ids)
        status_filter = " || ".join(f"status = '{s.value}'" for s in sorted(ACTIVE_OR_TERMINAL, key=lambda s: s.value))
        records = self._batched(CONNECTION_REQUESTS, "requester_id", sorted(ids), extra=status_filter)
        requests = [self._map_request(r) for r in records]
        return [r for r in requests if r.target_id in ids]

    def get_requests_from(
        self, requester_id: str, statuses: Collection[RequestStatus] = ACTIVE_OR_TERMINAL
    ) -> list[ConnectionRequest]:
        if not statuses:
            return []
        status_filter = " || ".join(f"status = '{s.value}'" for s in sorted(statuses, key=lambda s: s.value))
        records = self._full_list(
            CONNECTION_REQUESTS,
            f"requester_id = '{_escape_filter_value(requester_id)}' && ({status_filter})",
        )
        return [self._map_request(r) for r in records]

    def insert_pending_request(self, requester_id: str, target_id: str) -> ConnectionRequest:
        data = {"requester_id": requester_id, "target_id": target_id, "status": RequestStatus.PENDING.value}
        try:
            record = self.pb.collection(CONNECTION_REQUESTS).create(data)
        except ClientResponseError as e:
            if _is_unique_violation(e):
                raise DuplicateRequestError(requester_id, target_id) from e
            logger.error(f"Failed to create connection request: status={e.status}, data={getattr(e, 'data', None)}")
            raise GraphStoreError(f"Failed creating request {requester_id} -> {target_id}: {e}") from e
        return self._map_request(record)

    def set_request_status(
        self,
        requester_id: str,
        target_id: str,
        expected: RequestStatus,
        new: RequestStatus,
    ) -> bool:
        record = self._first(
            CONNECTION_REQUESTS, f"{self._pair_filter(requester_id, target_id)} && status = '{expected.value}'"
        )
        if record is None:
            return False
        self._call(
            f"updating request {record.id}",
            lambda: self.pb.collection(CONNECTION_REQUESTS).update(record.id, {"status": new.value}),
        )
        return True

    def delete_request(self, requester_id: str, target_id: str) -> bool:
        record = self._first(CONNECTION_REQUESTS, self._pair_filter(requester_id, target_id))
        if record is None:
            return False
        self._call(
            f"deleting request {record.id}",
            lambda: self.pb.collection(CONNECTION_REQUESTS).delete(record.id),
        )
        return True
