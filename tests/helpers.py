# tests/helpers.py
"""Helpers shared by the API tests."""

from fastapi.testclient import TestClient

from attendance_api.config import Settings

COUCH_URL = "http://couch.test:5984"


def make_settings(**overrides) -> Settings:
    values = dict(
        COUCH_URL=COUCH_URL,
        PRIMARY_DB="attendance",
        COUCH_ADMIN_USER="admin",
        COUCH_ADMIN_PASS="adminpw",
        SESSION_SECRET="test-secret",
        SESSION_TTL_SECONDS=3600,
    )
    values.update(overrides)
    return Settings(**values)


def login(client: TestClient, username: str, password: str):
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response
