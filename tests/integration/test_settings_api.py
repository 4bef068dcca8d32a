"""Integration tests for the settings endpoints (real SQLite, real encryption)"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from newsbrief.api.app import app


@pytest.fixture
def client(db):
    return TestClient(app)


def test_get_unknown_user_is_404(client):
    response = client.get("/api/settings/nobody")

    assert response.status_code == 404


def test_put_then_get_masks_credentials(client, config_payload):
    response = client.put("/api/settings/user-1", json=config_payload)

    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == "user-1"
    assert body["apiKeySet"] is True
    assert body["senderAppPasswordSet"] is True
    assert body["complete"] is True
    assert body["missing"] == []
    assert "AIzaTestKey-0001" not in response.text
    assert "abcd efgh" not in response.text

    fetched = client.get("/api/settings/user-1").json()
    assert fetched == body


def test_partial_put_merges(client, config_payload):
    client.put("/api/settings/user-1", json=config_payload)

    response = client.put(
        "/api/settings/user-1", json={"keywords": ["exports"], "scheduleFrequency": "weekly"}
    )

    body = response.json()
    assert body["keywords"] == ["exports"]
    assert body["scheduleFrequency"] == "weekly"
    assert body["apiKeySet"] is True
    assert body["receiverEmail"] == "reader@example.com"


def test_incomplete_settings_can_be_saved(client):
    response = client.put("/api/settings/user-1", json={"senderEmail": "sender@gmail.com"})

    assert response.status_code == 200
    assert response.json()["complete"] is False
    assert response.json()["missing"] == ["apiKey", "senderAppPassword", "receiverEmail"]


def test_legacy_field_names_accepted(client):
    response = client.put(
        "/api/settings/user-1",
        json={"geminiApiKey": "k", "appPassword": "p", "scheduleDay": "none"},
    )

    body = response.json()
    assert body["apiKeySet"] is True
    assert body["senderAppPasswordSet"] is True
    assert body["scheduleFrequency"] == "none"


def test_invalid_values_rejected_with_field_names(client):
    response = client.put(
        "/api/settings/user-1", json={"scheduleTime": "25:00", "scheduleFrequency": "hourly"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid settings"
    assert set(body["invalid_fields"]) == {"scheduleTime", "scheduleFrequency"}
    assert client.get("/api/settings/user-1").status_code == 404


def test_non_list_keywords_rejected_with_field_name(client):
    response = client.put("/api/settings/user-1", json={"keywords": 5})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid settings", "invalid_fields": ["keywords"]}


def test_null_keyword_entries_are_dropped(client):
    response = client.put("/api/settings/user-1", json={"keywords": ["rice", None]})

    assert response.status_code == 200
    assert response.json()["keywords"] == ["rice"]


def test_non_object_body_rejected(client):
    response = client.put("/api/settings/user-1", json=["not", "a", "dict"])

    assert response.status_code == 422


def test_requires_token_when_configured(client, config_payload, monkeypatch):
    monkeypatch.setenv("NEWSBRIEF_API_TOKEN", "secret-token")

    assert client.put("/api/settings/user-1", json=config_payload).status_code == 401

    response = client.put(
        "/api/settings/user-1",
        json=config_payload,
        headers={"Authorization": "Bearer secret-token"},
    )
    assert response.status_code == 200
