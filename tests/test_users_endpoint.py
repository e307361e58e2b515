from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from user_directory.main import app

ALEX = {"username": "alex_w", "firstName": "Alex", "email": "alex.w@example.com", "isActive": True}


@pytest.fixture
def client(monkeypatch):
    # Each lifespan builds a fresh in-process store.
    monkeypatch.setenv("USER_STORE_BACKEND", "memory")
    with TestClient(app) as c:
        yield c


def test_create_and_read_user(client):
    resp = client.post("/users", json=ALEX)
    assert resp.status_code == 201, resp.text
    assert resp.json() == ALEX

    resp = client.get("/users/alex_w")
    assert resp.status_code == 200
    assert resp.json() == ALEX


def test_list_users_starts_empty(client):
    resp = client.get("/users")
    assert resp.status_code == 200
    assert resp.json() == []


def test_invalid_input_returns_400(client):
    resp = client.post("/users", json={**ALEX, "username": "12345"})
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["kind"] == "invalid_input"
    assert detail["message"] == "Username must contain at least one letter"

    assert client.get("/users").json() == []


def test_string_is_active_is_rejected_by_validator(client):
    resp = client.post("/users", json={**ALEX, "isActive": "true"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == "Invalid active status"


def test_duplicate_returns_409_with_field(client):
    assert client.post("/users", json=ALEX).status_code == 201

    resp = client.post("/users", json={**ALEX, "email": "alex2@example.com"})
    assert resp.status_code == 409
    assert resp.json()["detail"]["field"] == "username"

    resp = client.post("/users", json=ALEX)
    assert resp.status_code == 409
    assert resp.json()["detail"]["field"] == "both"

    assert len(client.get("/users").json()) == 1


def test_read_missing_user_returns_404(client):
    resp = client.get("/users/ghost")
    assert resp.status_code == 404
    assert resp.json()["detail"]["kind"] == "store_error"


def test_update_user(client):
    client.post("/users", json=ALEX)

    resp = client.put("/users/alex_w", json={**ALEX, "firstName": "Alexander", "isActive": False})
    assert resp.status_code == 200, resp.text
    assert resp.json()["firstName"] == "Alexander"
    assert resp.json()["isActive"] is False


def test_update_missing_user_returns_404(client):
    resp = client.put("/users/ghost", json={**ALEX, "username": "ghost", "email": "ghost@example.com"})
    assert resp.status_code == 404
    assert "not found to update" in resp.json()["detail"]["message"]


def test_healthz_reports_backend(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    data = resp.json()
    assert data["ok"] is True
    assert data["backend"] == "memory"
    assert data["store_initialized"] is True


def test_responses_use_camel_case_keys(client):
    client.post("/users", json=ALEX)

    resp = client.get("/users")
    assert resp.status_code == 200
    assert resp.json() == [ALEX]
    assert "first_name" not in resp.json()[0]

    schema = client.get("/openapi.json").json()["components"]["schemas"]["UserOut"]
    assert set(schema["properties"]) == {"username", "firstName", "email", "isActive"}


def test_update_missing_user_with_taken_username_returns_404(client):
    client.post("/users", json=ALEX)

    resp = client.put("/users/ghost", json={**ALEX, "email": "ghost@example.com"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["kind"] == "store_error"
