"""
Circles - Core business logic for connection suggestions.

This package contains:
- models: Domain models (UserProfile, ConnectionRequest, Suggestion, ...)
- graph: Storage contract, PocketBase/in-memory stores, async accessor
- suggestions: Candidate generation, enrichment, scoring and the engine
- connection_requests: The single write path for connection requests
"""

from circles.connection_requests import ConnectionRequestWriter
from circles.errors import CirclesError, DuplicateRequestError, GraphStoreError, InvalidParametersError
from circles.models import (
    Candidate,
    ConnectionEdge,
    ConnectionRequest,
    RequestRef,
    RequestStatus,
    Suggestion,
    SuggestionAlgorithm,
    SuggestionPage,
    SuggestionParams,
    UserProfile,
)
from circles.suggestions.engine import SuggestionEngine

__all__ = [
    "Candidate",
    "CirclesError",
    "ConnectionEdge",
    "ConnectionRequest",
    "ConnectionRequestWriter",
    "DuplicateRequestError",
    "GraphStoreError",
    "InvalidParametersError",
    "RequestRef",
    "RequestStatus",
    "Suggestion",
    "SuggestionAlgorithm",
    "SuggestionEngine",
    "SuggestionPage",
    "SuggestionParams",
    "UserProfile",
]
