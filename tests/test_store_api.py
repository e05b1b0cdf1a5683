"""Tests for the conversations, personas and models routes."""

from __future__ import annotations

import httpx
import pytest

from app.api.dependencies import get_completion_client
from app.services.auth_service import create_access_token
from app.services.chat_store import ChatStore
from app.services.completion_client import FALLBACK_MODELS, CompletionClient
from conftest import OTHER_USER_ID


def _headers_for(user_id):
    return {"Authorization": f"Bearer {create_access_token(subject=user_id)}"}


class TestAuthRequired:
    def test_no_token(self, client):
        resp = client.get("/api/v1/conversations/")
        assert resp.status_code == 401

    def test_bad_token(self, client):
        resp = client.get("/api/v1/personas/", headers={"Authorization": "Bearer junk"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token"


class TestConversationRoutes:
    def test_create_and_list(self, client, auth_headers):
        created = client.post("/api/v1/conversations/", json={"model": "openai/gpt-5"}, headers=auth_headers)
        assert created.status_code == 200
        assert created.json()["title"] == "New Chat"

        listed = client.get("/api/v1/conversations/", headers=auth_headers)
        assert [c["id"] for c in listed.json()] == [created.json()["id"]]

    def test_create_with_foreign_persona(self, client, auth_headers, db):
        foreign = ChatStore(db, OTHER_USER_ID).create_persona(name="x", instructions="y")
        resp = client.post("/api/v1/conversations/", json={"persona_id": foreign.id}, headers=auth_headers)
        assert resp.status_code == 404

    def test_detail_includes_messages(self, client, auth_headers, store, conversation):
        store.insert_message(conversation.id, role="user", content="Hi")
        store.insert_message(conversation.id, role="assistant", content="Hey", model="openai/gpt-5")

        resp = client.get(f"/api/v1/conversations/{conversation.id}", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert [(m["role"], m["content"], m["model"]) for m in body["messages"]] == [
            ("user", "Hi", None),
            ("assistant", "Hey", "openai/gpt-5"),
        ]

    def test_detail_of_foreign_conversation(self, client, db):
        foreign = ChatStore(db, OTHER_USER_ID).create_conversation()
        resp = client.get(f"/api/v1/conversations/{foreign.id}", headers=_headers_for("user-1"))
        assert resp.status_code == 404

    def test_search(self, client, auth_headers, store):
        store.create_conversation(title="Trip to Rome")
        store.create_conversation(title="Tax questions")
        resp = client.get("/api/v1/conversations/", params={"q": "rome"}, headers=auth_headers)
        assert [c["title"] for c in resp.json()] == ["Trip to Rome"]

    def test_delete(self, client, auth_headers, conversation):
        resp = client.delete(f"/api/v1/conversations/{conversation.id}", headers=auth_headers)
        assert resp.status_code == 204
        resp = client.delete(f"/api/v1/conversations/{conversation.id}", headers=auth_headers)
        assert resp.status_code == 404


class TestPersonaRoutes:
    def test_crud(self, client, auth_headers):
        created = client.post(
            "/api/v1/personas/",
            json={"name": "Copywriter", "instructions": "Write punchy copy."},
            headers=auth_headers,
        )
        assert created.status_code == 200
        persona_id = created.json()["id"]

        updated = client.put(
            f"/api/v1/personas/{persona_id}",
            json={"name": "Senior copywriter", "instructions": "Write punchier copy."},
            headers=auth_headers,
        )
        assert updated.json()["name"] == "Senior copywriter"

        listed = client.get("/api/v1/personas/", headers=auth_headers)
        assert [p["id"] for p in listed.json()] == [persona_id]

        assert client.delete(f"/api/v1/personas/{persona_id}", headers=auth_headers).status_code == 204
        assert client.get("/api/v1/personas/", headers=auth_headers).json() == []

    def test_blank_fields_rejected(self, client, auth_headers):
        resp = client.post(
            "/api/v1/personas/", json={"name": "   ", "instructions": "x"}, headers=auth_headers
        )
        assert resp.status_code == 422

    def test_update_foreign_persona(self, client, db):
        foreign = ChatStore(db, OTHER_USER_ID).create_persona(name="x", instructions="y")
        resp = client.put(
            f"/api/v1/personas/{foreign.id}",
            json={"name": "a", "instructions": "b"},
            headers=_headers_for("user-1"),
        )
        assert resp.status_code == 404


class TestModelRoutes:
    def test_provider_models(self, client, auth_headers, fake_client):
        fake_client.models = [{"id": "openai/gpt-5", "name": "GPT-5"}]
        resp = client.get("/api/v1/models/", headers=auth_headers)
        assert resp.json() == {"data": [{"id": "openai/gpt-5", "name": "GPT-5"}]}

    def test_fallback_on_provider_failure(self, client, auth_headers, fake_client):
        fake_client.models = httpx.ConnectError("down")
        resp = client.get("/api/v1/models/", headers=auth_headers)
        ids = [m["id"] for m in resp.json()["data"]]
        assert ids == ["google/gemini-2.5-flash", "google/gemini-2.5-pro", "openai/gpt-5", "openai/gpt-5-mini"]

    def test_fallback_when_items_fail_validation(self, client, auth_headers, fake_client):
        fake_client.models = [{"id": 5, "name": None}]
        resp = client.get("/api/v1/models/", headers=auth_headers)
        assert resp.status_code == 200
        assert [m["id"] for m in resp.json()["data"]] == [m["id"] for m in FALLBACK_MODELS]

    def test_fallback_without_key(self, client, auth_headers, relay_settings, fake_client):
        relay_settings.OPENROUTER_API_KEY = None
        fake_client.models = [{"id": "never", "name": "never"}]
        resp = client.get("/api/v1/models/", headers=auth_headers)
        assert "never" not in [m["id"] for m in resp.json()["data"]]

    @pytest.mark.parametrize(
        "payload",
        [
            {"data": [{"id": 5}]},
            {"data": ["openai/gpt-5"]},
            {"data": None},
            {"models": []},
        ],
    )
    def test_fallback_on_malformed_provider_payload(self, api_app, client, auth_headers, payload):
        def handler(request: httpx.Request):
            return httpx.Response(200, json=payload)

        provider = CompletionClient(
            api_key="or-test-key",
            base_url="https://openrouter.test/api/v1",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        api_app.dependency_overrides[get_completion_client] = lambda: provider

        resp = client.get("/api/v1/models/", headers=auth_headers)

        assert resp.status_code == 200
        assert [m["id"] for m in resp.json()["data"]] == [m["id"] for m in FALLBACK_MODELS]

    def test_provider_list_through_http_client(self, api_app, client, auth_headers):
        def handler(request: httpx.Request):
            assert request.headers["Authorization"] == "Bearer or-test-key"
            return httpx.Response(200, json={"data": [{"id": 5}, {"id": "anthropic/claude", "name": "Claude"}]})

        provider = CompletionClient(
            api_key="or-test-key",
            base_url="https://openrouter.test/api/v1",
            http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        api_app.dependency_overrides[get_completion_client] = lambda: provider

        resp = client.get("/api/v1/models/", headers=auth_headers)

        assert resp.json() == {"data": [{"id": "anthropic/claude", "name": "Claude"}]}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
