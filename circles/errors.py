"""Error classes for the suggestion engine.

Store failures on the read path are fatal and propagate to the caller.
Writer no-ops are never errors; they are reported as ``False``.
"""

from __future__ import annotations


class CirclesError(Exception):
    """Base exception for the suggestion engine."""

    pass


class GraphStoreError(CirclesError):
    """Raised when a profile, edge or request query fails outright."""

    pass


class DuplicateRequestError(GraphStoreError):
    """Raised when inserting a request violates the (requester, target) uniqueness constraint."""

    def __init__(self, requester_id: str, target_id: str):
        self.requester_id = requester_id
        self.target_id = target_id
        super().__init__(f"Connection request {requester_id} -> {target_id} already exists")


class InvalidParametersError(CirclesError, ValueError):
    """Raised when suggestion parameters are out of range."""

    pass
