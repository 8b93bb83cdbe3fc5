"""
API endpoint tests for task parsing and email triage.

These tests use FastAPI's TestClient with the task service dependency
overridden by one built around stub generation clients, so the full
request path (validation, rate limiting, roster filtering, unassigned
policy and error envelopes) runs without network access.

Testing Strategy:
- Verify AI and fallback responses of both parse endpoints
- Confirm the agent role is filtered from parse rosters only
- Test triage success and template fallback
- Confirm error envelopes for invalid requests and rate limits
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.config import APISettings
from api.main import app
from api.routes import tasks as task_routes
from api.routes import triage as triage_routes
from api.services.task_service import TaskParsingService, get_task_service
from src.task_parsing.assignment import UnassignedPolicy
from src.task_parsing.errors import GenerationUnavailable
from src.task_parsing.extractor import TaskExtractor
from src.task_parsing.triage import EmailTriager

client = TestClient(app)

USERS = [
    {"id": "u1", "name": "Jordan", "role": "pm"},
    {"id": "u2", "name": "An", "role": "development"},
    {"id": "u3", "name": "Katie", "role": "design"},
    {"id": "a1", "name": "Botty", "role": "agent"},
]
PROJECTS = [{"id": "p1", "name": "TaskBoard"}]


@pytest.fixture
def stub_client():
    """Generation client double shared by the extractor and triager."""
    generation = MagicMock()
    generation.complete = AsyncMock()
    return generation


@pytest.fixture
def settings():
    return APISettings(
        GROQ_API_KEY=None,
        AI_PARSING_ENABLED=False,
        TASKBOARD_TEAM_NAME="Acme Studio",
        UNASSIGNED_POLICY=UnassignedPolicy.LEAVE_UNASSIGNED,
    )


@pytest.fixture
def service(settings, stub_client):
    """
    Task service wired to the stub client and installed as a dependency override.

    Yields:
        TaskParsingService: The service the routes will receive
    """
    service = TaskParsingService(
        settings,
        extractor=TaskExtractor(client=stub_client, timeout=1.0, timezone="UTC"),
        triager=EmailTriager(client=stub_client, team_name="Acme Studio", timeout=1.0, timezone="UTC"),
    )
    app.dependency_overrides[get_task_service] = lambda: service
    task_routes.parse_limiter.reset()
    triage_routes.triage_limiter.reset()
    yield service
    app.dependency_overrides.clear()


class TestChatParse:
    """Tests for POST /chat/parse."""

    def test_ai_parse(self, service, stub_client):
        stub_client.complete.return_value = json.dumps({
            "tasks": [
                {"title": "Design banner", "assignee_id": "u3", "priority": 2},
                {"title": "Fix login", "assignee_id": "u2"},
            ],
            "confidence": 0.88,
        })

        response = client.post("/chat/parse", json={
            "message": "Katie design banner and An fix login",
            "users": USERS,
            "projects": PROJECTS,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["parser"] == "ai"
        assert body["confidence"] == 0.88
        assert [task["assignee_id"] for task in body["parsed"]] == ["u3", "u2"]
        assert body["parsed"][0]["status"] == "doing"

    def test_agent_filtered_from_roster(self, service, stub_client):
        stub_client.complete.return_value = json.dumps({"tasks": [{"title": "Run report", "assignee_id": "a1"}]})

        response = client.post("/chat/parse", json={"message": "run report", "users": USERS})

        assert response.status_code == 200
        system_prompt = stub_client.complete.call_args.args[0]
        assert "Botty" not in system_prompt
        assert response.json()["parsed"][0]["assignee_id"] is None

    def test_fallback_parse(self, service, stub_client):
        stub_client.complete.side_effect = GenerationUnavailable("down")

        response = client.post("/chat/parse", json={
            "message": "Fix bug assign to Jordan urgent",
            "users": USERS,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["parser"] == "basic"
        assert body["confidence"] == 0.3
        assert body["parsed"][0]["assignee_id"] == "u1"
        assert body["parsed"][0]["priority"] == 1

    def test_requesting_user_policy(self, service, stub_client, settings):
        settings.UNASSIGNED_POLICY = UnassignedPolicy.REQUESTING_USER
        stub_client.complete.return_value = json.dumps({"tasks": [{"title": "Something vague"}]})

        response = client.post("/chat/parse", json={
            "message": "something vague",
            "users": USERS,
            "requesting_user_id": "u1",
        })

        assert response.json()["parsed"][0]["assignee_id"] == "u1"

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message_rejected(self, service, message):
        response = client.post("/chat/parse", json={"message": message, "users": USERS})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_role_rejected(self, service):
        response = client.post("/chat/parse", json={
            "message": "Fix bug",
            "users": [{"id": "u1", "name": "Jordan", "role": "wizard"}],
        })
        assert response.status_code == 422

    def test_rate_limited(self, service, stub_client):
        stub_client.complete.return_value = json.dumps({"tasks": [{"title": "Task"}]})
        payload = {"message": "task", "users": USERS}

        statuses = [client.post("/chat/parse", json=payload).status_code for _ in range(11)]

        assert statuses[:10] == [200] * 10
        assert statuses[10] == 429
        last = client.post("/chat/parse", json=payload)
        assert last.json()["error_code"] == "HTTP_429"
        assert "retry-after" in last.headers


class TestTaskAssign:
    """Tests for POST /v1/tasks/assign."""

    def test_returns_first_task(self, service, stub_client):
        stub_client.complete.return_value = json.dumps({
            "tasks": [{"title": "First", "assignee_id": "u2"}, {"title": "Second"}],
            "confidence": 0.7,
        })

        response = client.post("/v1/tasks/assign", json={"text": "First and second", "users": USERS})

        assert response.status_code == 200
        body = response.json()
        assert body["task"]["title"] == "First"
        assert body["parser"] == "ai"


class TestEmailTriage:
    """Tests for POST /email/triage."""

    @staticmethod
    def _request(**overrides):
        payload = {
            "from_email": "dana@client.example",
            "from_name": "Dana Lee",
            "subject": "Website bug",
            "body": "The contact form returns an error on submit.",
            "users": USERS,
        }
        payload.update(overrides)
        return payload

    def test_ai_triage(self, service, stub_client):
        stub_client.complete.return_value = json.dumps({
            "category": "development",
            "assignee_role": "development",
            "task_title": "Fix contact form submit error",
            "task_priority": 2,
            "task_sections": [{"heading": "Goal", "content": "Form submits"}],
            "draft_reply": "Hi Dana, we're on it. Best, Acme Studio",
            "reasoning": "Website bug",
            "confidence": 0.9,
        })

        response = client.post("/email/triage", json=self._request())

        assert response.status_code == 200
        body = response.json()
        assert body["parser"] == "ai"
        assert body["triage"]["category"] == "development"
        assert body["assignee"] == {"id": "u2", "name": "An"}
        assert body["reply_subject"] == "Re: Website bug"
        assert len(body["triage"]["task_sections"]) == 2

    def test_agent_routing_keeps_agent(self, service, stub_client):
        stub_client.complete.return_value = json.dumps({
            "category": "general",
            "assignee_role": "agent",
            "task_title": "Compile monthly report",
            "draft_reply": "Hi Dana, the report will follow. Best, Acme Studio",
        })

        response = client.post("/email/triage", json=self._request(subject="Monthly report"))

        assert response.json()["assignee"] == {"id": "a1", "name": "Botty"}

    def test_template_fallback(self, service, stub_client):
        stub_client.complete.return_value = "not json"

        response = client.post("/email/triage", json=self._request())

        assert response.status_code == 200
        body = response.json()
        assert body["parser"] == "template"
        assert body["triage"] is None
        assert body["assignee"] is None
        assert body["draft_reply"].startswith("Hi Dana,")
        assert body["draft_reply"].endswith("Acme Studio")

    def test_unexpected_client_error_uses_template(self, service, stub_client):
        stub_client.complete.side_effect = RuntimeError("connection reset")

        response = client.post("/email/triage", json=self._request())

        assert response.status_code == 200
        assert response.json()["parser"] == "template"

    def test_missing_subject_rejected(self, service):
        payload = self._request()
        del payload["subject"]
        response = client.post("/email/triage", json=payload)
        assert response.status_code == 422


def test_health(service):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "ai_parsing": True}


def test_fallback_models_setting_reaches_both_pipelines():
    service = TaskParsingService(APISettings(GROQ_API_KEY=None, USE_FALLBACK_MODELS=True))

    for model_manager in (service.extractor.model_manager, service.triager.model_manager):
        assert model_manager.get_model_config("task_extraction")["name"] == "llama-3.1-8b-instant"
