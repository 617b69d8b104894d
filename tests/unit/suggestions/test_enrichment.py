"""Tests for mutual-friend and request-status enrichment."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from circles.errors import GraphStoreError
from circles.graph import GraphAccessor, InMemoryGraphStore
from circles.models import Candidate, RequestStatus, SuggestionAlgorithm
from circles.suggestions.enrichment import enrich_candidates, load_mutual_info, load_request_info


def candidates_for(store: InMemoryGraphStore, *user_ids: str, mutual_counts: dict[str, int] | None = None):
    mutual_counts = mutual_counts or {}
    return [
        Candidate(
            profile=store.get_profile(uid),
            base_score=0.0,
            strategy=SuggestionAlgorithm.POPULARITY,
            mutual_count=mutual_counts.get(uid, 0),
        )
        for uid in user_ids
    ]


class TestMutualInfo:
    @pytest.mark.asyncio
    async def test_counts_and_samples(self, accessor: GraphAccessor) -> None:
        info = await load_mutual_info(accessor, {"bob", "carol"}, ["dave", "erin", "frank"])

        assert info["dave"].count == 2
        assert [p.id for p in info["dave"].sample] == ["bob", "carol"]
        assert info["erin"].count == 1
        assert "frank" not in info

    @pytest.mark.asyncio
    async def test_sample_is_capped_but_count_is_not(self, graph_store: InMemoryGraphStore, profile_factory) -> None:
        followed = ["f1", "f2", "f3", "f4", "f5"]
        graph_store.add_profiles(profile_factory(uid) for uid in followed)
        for uid in followed:
            graph_store.create_edge("gina", uid)
            graph_store.create_edge(uid, "frank")

        info = await load_mutual_info(GraphAccessor(graph_store), set(followed), ["frank"], sample_size=3)

        assert info["frank"].count == 5
        assert [p.id for p in info["frank"].sample] == ["f1", "f2", "f3"]

    @pytest.mark.asyncio
    async def test_nothing_to_do_without_following(self, accessor: GraphAccessor) -> None:
        assert await load_mutual_info(accessor, set(), ["dave"]) == {}


class TestRequestInfo:
    @pytest.mark.asyncio
    async def test_outgoing_and_incoming(self, graph_store: InMemoryGraphStore) -> None:
        outgoing = graph_store.add_request("alice", "dave")
        graph_store.add_request("erin", "alice", RequestStatus.REJECTED)

        info = await load_request_info(GraphAccessor(graph_store), "alice", ["dave", "erin", "frank"])

        assert info["dave"].outgoing is not None
        assert info["dave"].outgoing.id == outgoing.id
        assert info["dave"].incoming is None
        assert info["erin"].incoming is not None
        assert info["erin"].incoming.status is RequestStatus.REJECTED
        assert "frank" not in info


class TestEnrichCandidates:
    @pytest.mark.asyncio
    async def test_builds_suggestions_in_candidate_order(self, graph_store: InMemoryGraphStore) -> None:
        graph_store.add_request("dave", "alice")
        accessor = GraphAccessor(graph_store)

        suggestions = await enrich_candidates(
            accessor, "alice", {"bob", "carol"}, candidates_for(graph_store, "frank", "dave")
        )

        assert [s.id for s in suggestions] == ["frank", "dave"]
        frank, dave = suggestions
        assert frank.mutual_count == 0
        assert frank.can_send_request is True
        assert dave.mutual_count == 2
        assert dave.incoming_request is not None
        assert dave.can_send_request is False
        assert all(s.relevance_score == 0.0 for s in suggestions)

    @pytest.mark.asyncio
    async def test_include_mutual_false_skips_pass(self, graph_store: InMemoryGraphStore) -> None:
        accessor = GraphAccessor(graph_store)
        accessor.mutual_connections = AsyncMock()

        suggestions = await enrich_candidates(
            accessor, "alice", {"bob", "carol"}, candidates_for(graph_store, "dave"), include_mutual=False
        )

        accessor.mutual_connections.assert_not_called()
        assert suggestions[0].mutual_count == 0
        assert suggestions[0].mutual_sample == []

    @pytest.mark.asyncio
    async def test_failed_mutual_pass_degrades(self, graph_store: InMemoryGraphStore, caplog) -> None:
        graph_store.add_request("alice", "dave")
        accessor = GraphAccessor(graph_store)
        accessor.mutual_connections = AsyncMock(side_effect=GraphStoreError("edges unavailable"))

        suggestions = await enrich_candidates(
            accessor,
            "alice",
            {"bob", "carol"},
            candidates_for(graph_store, "dave", mutual_counts={"dave": 2}),
        )

        # Generation-time count survives; request status still attached
        assert suggestions[0].mutual_count == 2
        assert suggestions[0].mutual_sample == []
        assert suggestions[0].outgoing_request is not None
        assert "Mutual-friend enrichment failed" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_request_pass_degrades(self, graph_store: InMemoryGraphStore) -> None:
        accessor = GraphAccessor(graph_store)
        accessor.requests_with = AsyncMock(side_effect=GraphStoreError("requests unavailable"))

        suggestions = await enrich_candidates(accessor, "alice", {"bob", "carol"}, candidates_for(graph_store, "dave"))

        assert suggestions[0].mutual_count == 2
        assert suggestions[0].outgoing_request is None
        assert suggestions[0].incoming_request is None

    @pytest.mark.asyncio
    async def test_no_candidates(self, accessor: GraphAccessor) -> None:
        assert await enrich_candidates(accessor, "alice", {"bob"}, []) == []
