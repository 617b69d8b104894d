"""Tests for the async GraphAccessor facade."""

from __future__ import annotations

import pytest

from circles.graph import GraphAccessor, InMemoryGraphStore
from circles.models import RequestStatus


class TestGraphAccessor:
    @pytest.mark.asyncio
    async def test_profiles_keyed_by_id(self, accessor: GraphAccessor) -> None:
        profiles = await accessor.profiles(["dave", "erin", "nobody"])
        assert set(profiles) == {"dave", "erin"}
        assert profiles["erin"].is_verified

    @pytest.mark.asyncio
    async def test_profiles_empty_input_skips_store(self, accessor: GraphAccessor) -> None:
        assert await accessor.profiles([]) == {}

    @pytest.mark.asyncio
    async def test_following_is_a_set(self, accessor: GraphAccessor) -> None:
        assert await accessor.following("alice") == {"bob", "carol"}

    @pytest.mark.asyncio
    async def test_two_hop_sources(self, accessor: GraphAccessor) -> None:
        sources = await accessor.two_hop_sources({"bob", "carol"})
        assert sources == {
            "dave": {"bob", "carol"},
            "erin": {"bob"},
            "henry": {"bob"},
        }

    @pytest.mark.asyncio
    async def test_two_hop_sources_without_following(self, accessor: GraphAccessor) -> None:
        assert await accessor.two_hop_sources(set()) == {}

    @pytest.mark.asyncio
    async def test_mutual_connections_restricted_to_candidates(self, accessor: GraphAccessor) -> None:
        mutual = await accessor.mutual_connections({"bob", "carol"}, ["dave", "frank"])
        assert mutual == {"dave": {"bob", "carol"}}

    @pytest.mark.asyncio
    async def test_pending_outgoing_ignores_resolved_requests(self, graph_store: InMemoryGraphStore) -> None:
        graph_store.add_request("alice", "frank")
        graph_store.add_request("alice", "gina", RequestStatus.REJECTED)
        graph_store.add_request("dave", "alice")
        accessor = GraphAccessor(graph_store)

        assert await accessor.pending_outgoing("alice") == {"frank"}

    @pytest.mark.asyncio
    async def test_requests_with_drops_rows_between_candidates(self, graph_store: InMemoryGraphStore) -> None:
        graph_store.add_request("alice", "frank")
        graph_store.add_request("dave", "alice", RequestStatus.REJECTED)
        graph_store.add_request("dave", "frank")
        accessor = GraphAccessor(graph_store)

        requests = await accessor.requests_with("alice", ["dave", "frank"])

        assert sorted((r.requester_id, r.target_id) for r in requests) == [("alice", "frank"), ("dave", "alice")]
