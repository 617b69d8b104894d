"""Tests for the connection request endpoints."""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from circles.connection_requests import ConnectionRequestWriter
from circles.errors import GraphStoreError
from circles.graph import InMemoryGraphStore


@pytest.fixture
def client(graph_store: InMemoryGraphStore) -> Generator[TestClient, None, None]:
    """Test client whose writer targets the sample graph."""
    writer = ConnectionRequestWriter(graph_store)
    with patch("api.routers.connection_requests.get_request_writer", return_value=writer):
        from api.routers.connection_requests import router

        app = FastAPI()
        app.include_router(router)

        yield TestClient(app)


class TestSendConnectionRequest:
    """Test POST /api/connection-requests."""

    def test_send_then_repeat(self, client: TestClient, graph_store: InMemoryGraphStore) -> None:
        body = {"requester_id": "alice", "target_id": "dave"}

        first = client.post("/api/connection-requests", json=body)
        second = client.post("/api/connection-requests", json=body)

        assert first.status_code == 200
        assert first.json() == {"sent": True}
        assert second.json() == {"sent": False}
        assert len(graph_store.get_requests_between({"alice", "dave"})) == 1

    def test_already_following_is_not_an_error(self, client: TestClient) -> None:
        response = client.post("/api/connection-requests", json={"requester_id": "alice", "target_id": "bob"})

        assert response.status_code == 200
        assert response.json() == {"sent": False}

    @pytest.mark.parametrize(
        "body",
        [
            {"requester_id": "alice", "target_id": "alice"},
            {"requester_id": "", "target_id": "dave"},
            {"requester_id": "alice"},
        ],
    )
    def test_invalid_body(self, client: TestClient, body: dict) -> None:
        assert client.post("/api/connection-requests", json=body).status_code == 422

    def test_store_failure_returns_503(self) -> None:
        writer = Mock()
        writer.send_request_async = AsyncMock(side_effect=GraphStoreError("store offline"))
        with patch("api.routers.connection_requests.get_request_writer", return_value=writer):
            from api.routers.connection_requests import router

            app = FastAPI()
            app.include_router(router)
            response = TestClient(app).post(
                "/api/connection-requests", json={"requester_id": "alice", "target_id": "dave"}
            )

        assert response.status_code == 503


class TestRespondAndWithdraw:
    """Test POST /respond and DELETE /{requester_id}/{target_id}."""

    def test_accept_creates_edge(self, client: TestClient, graph_store: InMemoryGraphStore) -> None:
        client.post("/api/connection-requests", json={"requester_id": "gina", "target_id": "alice"})

        response = client.post(
            "/api/connection-requests/respond",
            json={"requester_id": "gina", "target_id": "alice", "accept": True},
        )

        assert response.json() == {"updated": True}
        assert graph_store.edge_exists("gina", "alice")

    def test_respond_without_pending(self, client: TestClient) -> None:
        response = client.post(
            "/api/connection-requests/respond",
            json={"requester_id": "gina", "target_id": "alice", "accept": False},
        )
        assert response.json() == {"updated": False}

    def test_withdraw_then_resend(self, client: TestClient) -> None:
        body = {"requester_id": "gina", "target_id": "alice"}
        client.post("/api/connection-requests", json=body)
        client.post("/api/connection-requests/respond", json={**body, "accept": False})

        assert client.post("/api/connection-requests", json=body).json() == {"sent": False}
        assert client.delete("/api/connection-requests/gina/alice").json() == {"withdrawn": True}
        assert client.post("/api/connection-requests", json=body).json() == {"sent": True}
