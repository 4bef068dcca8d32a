"""Unit tests for the shared bearer-token dependency"""

from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from newsbrief.infrastructure.auth import require_api_token


def create_test_app():
    test_app = FastAPI()

    @test_app.get("/protected", dependencies=[Depends(require_api_token)])
    async def protected():
        return {"status": "ok"}

    return test_app


def test_open_when_token_unset():
    client = TestClient(create_test_app())

    assert client.get("/protected").status_code == 200


def test_rejects_missing_header(monkeypatch):
    monkeypatch.setenv("NEWSBRIEF_API_TOKEN", "secret-token")
    client = TestClient(create_test_app())

    response = client.get("/protected")

    assert response.status_code == 401
    assert "Authorization header required" in response.json()["detail"]


def test_rejects_non_bearer_scheme(monkeypatch):
    monkeypatch.setenv("NEWSBRIEF_API_TOKEN", "secret-token")
    client = TestClient(create_test_app())

    response = client.get("/protected", headers={"Authorization": "Basic secret-token"})

    assert response.status_code == 401


def test_rejects_wrong_token(monkeypatch):
    monkeypatch.setenv("NEWSBRIEF_API_TOKEN", "secret-token")
    client = TestClient(create_test_app())

    response = client.get("/protected", headers={"Authorization": "Bearer wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API token"


def test_accepts_correct_token(monkeypatch):
    monkeypatch.setenv("NEWSBRIEF_API_TOKEN", "secret-token")
    client = TestClient(create_test_app())

    response = client.get("/protected", headers={"Authorization": "Bearer secret-token"})

    assert response.status_code == 200
