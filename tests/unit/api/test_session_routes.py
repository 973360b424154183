"""
Unit Tests for the HTTP API

Drives sessions through the FastAPI app with TestClient, using the default
configuration profiles and skill catalog.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from skillforce.api.routes.sessions import get_session_manager
from skillforce.api.server import create_app
from skillforce.application.factory import AgentFactory
from skillforce.application.sessions import AgentSessionManager

REPO_CONFIGS = Path(__file__).resolve().parents[3] / "configs"


def parse_sse(body: str) -> list[dict]:
    return [
        json.loads(chunk[len("data: "):])
        for chunk in body.split("\n\n")
        if chunk.startswith("data: ")
    ]


@pytest.fixture
def manager():
    return AgentSessionManager(AgentFactory(config_dir=REPO_CONFIGS))


@pytest.fixture
def client(manager):
    app = create_app()
    app.dependency_overrides[get_session_manager] = lambda: manager
    return TestClient(app)


@pytest.fixture
def session_id(client):
    response = client.post("/api/v1/sessions", json={"profile": "dev"})
    return response.json()["session_id"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSessionLifecycle:
    def test_create_session(self, client):
        response = client.post("/api/v1/sessions", json={"profile": "dev", "user_id": "u-api"})

        assert response.status_code == 201
        body = response.json()
        assert body["session_id"].startswith("agent-")
        assert body["phase"] == "idle"
        assert body["organization_id"] == "demo-org"
        assert body["user_id"] == "u-api"

    def test_unknown_profile(self, client):
        response = client.post("/api/v1/sessions", json={"profile": "missing"})

        assert response.status_code == 404
        assert "Profile not found" in response.json()["detail"]

    def test_list_sessions(self, client, session_id):
        assert client.get("/api/v1/sessions").json() == {"sessions": [session_id]}

    def test_reset_moves_session_to_new_id(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/reset")

        assert response.status_code == 200
        new_id = response.json()["session_id"]
        assert new_id != session_id
        assert client.get(f"/api/v1/sessions/{new_id}").status_code == 200
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_delete_session(self, client, session_id):
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    @pytest.mark.parametrize(
        "method, path, payload",
        [
            ("get", "", None),
            ("get", "/history", None),
            ("post", "/run", {"message": "hi"}),
            ("post", "/respond", {"message_id": "question-x", "response": "hi"}),
            ("post", "/execute", None),
            ("post", "/reset", None),
        ],
    )
    def test_unknown_session_is_404(self, client, method, path, payload):
        kwargs = {"json": payload} if payload is not None else {}
        response = getattr(client, method)(f"/api/v1/sessions/agent-missing{path}", **kwargs)

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found: agent-missing"


class TestSessionStreaming:
    def test_run_streams_full_cascade(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/run",
            json={"message": "Help me reach out to 50 SaaS leads"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = parse_sse(response.text)
        types = [event["type"] for event in events]
        assert types[0] == "phase_change"
        assert "plan_created" in types
        assert types.count("step_complete") == 2
        assert types[-1] == "complete"
        report = next(event["report"] for event in events if event["type"] == "report")
        assert report["summary"] == "Completed successfully! 2 action(s) executed."

    def test_question_then_respond(self, client, session_id):
        events = parse_sse(
            client.post(f"/api/v1/sessions/{session_id}/run", json={"message": "Help me"}).text
        )

        question = events[-1]["message"]
        assert question["type"] == "question"
        assert question["payload"]["question_field"] == "action"

        events = parse_sse(
            client.post(
                f"/api/v1/sessions/{session_id}/respond",
                json={"message_id": question["id"], "response": "find leads for CFOs"},
            ).text
        )

        assert events[-1]["type"] == "complete"
        state = client.get(f"/api/v1/sessions/{session_id}").json()
        assert state["phase"] == "report"
        assert state["goal"]["goal_statement"] == "Help me (for CFOs)"
        assert state["context"]["target"] == "CFOs"

    def test_history(self, client, session_id):
        client.post(f"/api/v1/sessions/{session_id}/run", json={"message": "Help me"})

        messages = client.get(f"/api/v1/sessions/{session_id}/history").json()["messages"]

        assert messages[0]["content"] == "Help me"
        assert messages[-1]["type"] == "question"

    def test_execute_without_plan(self, client, session_id):
        events = parse_sse(client.post(f"/api/v1/sessions/{session_id}/execute").text)
        assert events == [{"type": "error", "error": "No plan to execute"}]

    def test_manual_execution(self, client):
        session_id = client.post(
            "/api/v1/sessions", json={"profile": "dev", "auto_execute": False}
        ).json()["session_id"]

        run_events = parse_sse(
            client.post(
                f"/api/v1/sessions/{session_id}/run",
                json={"message": "Help me reach out to 50 SaaS leads"},
            ).text
        )
        assert "step_start" not in [event["type"] for event in run_events]

        events = parse_sse(client.post(f"/api/v1/sessions/{session_id}/execute").text)
        types = [event["type"] for event in events]
        assert types.count("step_complete") == 2
        assert types[-1] == "complete"

    def test_empty_message_is_rejected(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/run", json={"message": ""})
        assert response.status_code == 422
