"""
HTTP adapter tests using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from convo_agent.api.http_api import FEATURES, create_app
from convo_agent.core.factory import build_orchestrator


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


class TestHealthEndpoint:

    def test_root_reports_capabilities(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["features"] == FEATURES
        assert data["weather_api_configured"] is False
        # index warmed during startup: two paragraphs pass the length filter
        assert data["knowledge_chunks"] == 2
        assert "timestamp" in data

    def test_unknown_route_is_404(self, client):
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}


class TestAgentMessageEndpoint:

    def test_calculation(self, client):
        response = client.post("/agent/message", json={"message": "calculate 2 + 2", "session_id": "s1"})
        assert response.status_code == 200

        data = response.json()
        assert data["response"] == "2 + 2 = 4"
        assert data["session_id"] == "s1"
        assert "timestamp" in data

    def test_weather_demo(self, client):
        response = client.post("/agent/message", json={"message": "weather in Tokyo", "session_id": "s1"})
        assert response.status_code == 200
        assert "Tokyo" in response.json()["response"]

    def test_greeting(self, client):
        response = client.post("/agent/message", json={"message": "hello", "session_id": "s2"})
        assert response.status_code == 200
        assert response.json()["response"].startswith("Hello!")

    @pytest.mark.parametrize(
        "body",
        [
            {"message": "", "session_id": "s1"},
            {"message": "hi", "session_id": ""},
            {"message": "hi"},
            {"session_id": "s1"},
            {},
        ],
    )
    def test_missing_fields_are_400(self, client, body):
        response = client.post("/agent/message", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Message and session_id are required"}

    def test_malformed_body_is_400(self, client):
        response = client.post(
            "/agent/message",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_internal_failure_is_500(self, settings):
        orchestrator = build_orchestrator(settings)

        def broken_query(text, top_k=3):
            raise RuntimeError("secret detail")

        orchestrator.knowledge_index.query = broken_query

        with TestClient(create_app(orchestrator=orchestrator)) as client:
            response = client.post("/agent/message", json={"message": "hello", "session_id": "s1"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_history_accumulates_per_session(self, client):
        client.post("/agent/message", json={"message": "calculate 1 + 1", "session_id": "h"})
        client.post("/agent/message", json={"message": "calculate 2 + 2", "session_id": "h"})

        store = client.app.state.orchestrator.session_store
        assert len(store.recent("h", 10)) == 4
        assert client.get("/").json()["active_sessions"] == 1
