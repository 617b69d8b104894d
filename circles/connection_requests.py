"""Connection-request writer - the only mutation path.

Every precondition failure is an expected no-op reported as ``False``.
Uniqueness is enforced by the store, not by application locks: when two
callers race past the precondition check, the store rejects the second
insert and that caller also sees ``False``.
"""

from __future__ import annotations

import asyncio
import logging

from .errors import DuplicateRequestError
from .graph.store import GraphStore
from .models import RequestStatus

logger = logging.getLogger(__name__)


class ConnectionRequestWriter:
    """Creates, resolves and withdraws connection requests."""

    def __init__(self, store: GraphStore) -> None:
        """Initialize with the backing store.

        Args:
            store: GraphStore that enforces (requester, target) uniqueness.
        """
        self.store = store

    def send_request(self, requester_id: str, target_id: str) -> bool:
        """Create a pending request from requester to target.

        Returns:
            True if a new pending request was stored, False if the user already
            follows the target or any request exists between the pair
        """
        if requester_id == target_id:
            logger.debug(f"Ignoring self-request from {requester_id}")
            return False

        if self.store.edge_exists(requester_id, target_id):
            logger.debug(f"{requester_id} already follows {target_id}, not sending request")
            return False

        existing = self.store.get_requests_between({requester_id, target_id})
        if existing:
            statuses = ", ".join(f"{r.requester_id}->{r.target_id}={r.status.value}" for r in existing)
            logger.debug(f"Request already exists between {requester_id} and {target_id}: {statuses}")
            return False

        try:
            request = self.store.insert_pending_request(requester_id, target_id)
        except DuplicateRequestError:
            logger.info(f"Concurrent request {requester_id} -> {target_id} already stored")
            return False

        logger.info(f"Connection request {request.id} sent: {requester_id} -> {target_id}")
        return True

    def respond_to_request(self, target_id: str, requester_id: str, accept: bool) -> bool:
        """Accept or reject a pending request addressed to target.

        Accepting also creates the follow edge requester -> target.

        Returns:
            True if the pending request was resolved, False if there was none
        """
        new_status = RequestStatus.ACCEPTED if accept else RequestStatus.REJECTED
        if not self.store.set_request_status(requester_id, target_id, RequestStatus.PENDING, new_status):
            logger.debug(f"No pending request {requester_id} -> {target_id} to {new_status.value}")
            return False

        if accept and not self.store.create_edge(requester_id, target_id):
            logger.debug(f"Edge {requester_id} -> {target_id} already existed on accept")

        logger.info(f"Connection request {requester_id} -> {target_id} {new_status.value}")
        return True

    def withdraw_request(self, requester_id: str, target_id: str) -> bool:
        """Delete the requester's request toward target, whatever its status.

        This is the explicit clear that lets a new request be sent after a
        rejection.
        """
        deleted = self.store.delete_request(requester_id, target_id)
        if deleted:
            logger.info(f"Connection request {requester_id} -> {target_id} withdrawn")
        return deleted

    # Async wrappers for the HTTP layer

    async def send_request_async(self, requester_id: str, target_id: str) -> bool:
        return await asyncio.to_thread(self.send_request, requester_id, target_id)

    async def respond_to_request_async(self, target_id: str, requester_id: str, accept: bool) -> bool:
        return await asyncio.to_thread(self.respond_to_request, target_id, requester_id, accept)

    async def withdraw_request_async(self, requester_id: str, target_id: str) -> bool:
        return await asyncio.to_thread(self.withdraw_request, requester_id, target_id)
