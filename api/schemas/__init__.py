"""
Pydantic schemas for the Circles API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .connection_requests import (
    ConnectionRequestCreate,
    ConnectionRequestDecision,
    ConnectionRequestSentResponse,
    ConnectionRequestUpdatedResponse,
    ConnectionRequestWithdrawnResponse,
)
from .suggestions import (
    ProfileSummary,
    RequestRefSchema,
    SearchResponse,
    SuggestionSchema,
    SuggestionsResponse,
)

__all__ = [
    "ConnectionRequestCreate",
    "ConnectionRequestDecision",
    "ConnectionRequestSentResponse",
    "ConnectionRequestUpdatedResponse",
    "ConnectionRequestWithdrawnResponse",
    "ProfileSummary",
    "RequestRefSchema",
    "SearchResponse",
    "SuggestionSchema",
    "SuggestionsResponse",
]
