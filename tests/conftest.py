"""
Root test configuration and fixtures for the Circles project.

This conftest.py provides common fixtures for all test categories:
- unit/: Fast, isolated unit tests (in-memory graph store, mocked PocketBase)

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from circles.graph import GraphAccessor, InMemoryGraphStore  # noqa: E402
from circles.models import UserProfile  # noqa: E402
from circles.suggestions import SuggestionEngine  # noqa: E402

# Fixed reference time for recency scoring
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def make_profile(user_id: str, **overrides: Any) -> UserProfile:
    """Build a complete, bonus-free profile unless overridden."""
    fields: dict[str, Any] = {
        "id": user_id,
        "username": user_id,
        "full_name": user_id.title(),
        "bio": None,
        "avatar_url": None,
        "location": None,
        "is_verified": False,
        "followers_count": 0,
        "following_count": 0,
        "created_at": datetime(2025, 1, 1, tzinfo=UTC),
    }
    fields.update(overrides)
    return UserProfile(**fields)


def create_mock_pocketbase():
    """Create a comprehensive mock PocketBase instance."""
    mock_pb = Mock()

    mock_collection = Mock()
    mock_collection.auth_with_password = Mock(return_value=True)

    mock_list_response = Mock()
    mock_list_response.items = []
    mock_list_response.total_items = 0
    mock_list_response.total_pages = 1
    mock_list_response.page = 1
    mock_list_response.per_page = 30

    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_list = Mock(return_value=mock_list_response)
    mock_collection.get_one = Mock()
    mock_collection.create = Mock(return_value=Mock(id="mock-id"))
    mock_collection.update = Mock()
    mock_collection.delete = Mock()

    # Make collection callable to return itself for chaining
    mock_pb.collection = Mock(return_value=mock_collection)

    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"

    return mock_pb


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Automatically mock PocketBase to prevent real connections.

    Set SKIP_MOCKING=true for tests that need a live server.
    """
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()

    with patch("pocketbase.PocketBase") as mock_pb_class:
        mock_pb_class.return_value = mock_pb
        yield {"pocketbase": mock_pb}


@pytest.fixture
def graph_store() -> InMemoryGraphStore:
    """A small social graph.

    alice follows bob and carol. bob and carol both follow dave; bob also
    follows erin. erin follows frank. henry and iris never finished
    onboarding (no display name / no handle).
    """
    store = InMemoryGraphStore()
    store.add_profiles(
        [
            make_profile("alice", location="Austin, TX", followers_count=10),
            make_profile("bob", followers_count=50),
            make_profile("carol", followers_count=40),
            make_profile("dave", followers_count=120, location="Austin, TX"),
            make_profile("erin", followers_count=300, is_verified=True),
            make_profile("frank", followers_count=450, location="Denver, CO"),
            make_profile("gina", followers_count=90, created_at=datetime(2026, 2, 20, tzinfo=UTC)),
            make_profile("henry", full_name=None, followers_count=10_000),
            make_profile("iris", username="", followers_count=5_000, location="Austin, TX"),
        ]
    )
    for follower, following in [
        ("alice", "bob"),
        ("alice", "carol"),
        ("bob", "dave"),
        ("carol", "dave"),
        ("bob", "erin"),
        ("bob", "henry"),
        ("erin", "frank"),
    ]:
        store.create_edge(follower, following)
    return store


@pytest.fixture
def accessor(graph_store: InMemoryGraphStore) -> GraphAccessor:
    return GraphAccessor(graph_store)


@pytest.fixture
def engine(accessor: GraphAccessor) -> SuggestionEngine:
    """Engine over the sample graph with a fixed clock."""
    return SuggestionEngine(accessor, clock=lambda: NOW)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def profile_factory():
    """Factory for complete profiles; pass overrides to add bonuses or gaps."""
    return make_profile
