# tests/test_users_api.py
"""API tests for user administration and admin-credential degradation."""

import pytest
from fastapi.testclient import TestClient

from attendance_api.main import create_app
from helpers import login, make_settings


@pytest.fixture
def no_admin_app(couch):
    settings = make_settings(COUCH_ADMIN_USER="", COUCH_ADMIN_PASS="")
    return create_app(settings, transport=couch.transport())


class TestUserAdmin:
    def test_list_users(self, admin):
        response = admin.get("/api/users")
        assert response.status_code == 200
        names = [u["name"] for u in response.json()["rows"]]
        assert names == ["alice", "root"]
        assert "password" not in response.json()["rows"][0]

    def test_create_user(self, admin, couch, app):
        response = admin.post("/api/users", json={
            "name": "carol", "password": "carolpw", "roles": "staff, night-shift",
            "fullName": "Carol C", "department": "Ops",
        })
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["roles"] == ["staff", "night-shift"]
        assert user["department"] == "Ops"

        doc = couch.dbs["_users"]["org.couchdb.user:carol"]
        assert doc["type"] == "user"

        carol = TestClient(app)
        assert login(carol, "carol", "carolpw").json()["user"]["roles"] == ["night-shift", "staff"]

    def test_user_writes_use_admin_credential(self, admin, couch):
        admin.post("/api/users", json={"name": "dave", "password": "x"})
        method, path, headers = couch.requests[-1]
        assert (method, path) == ("PUT", "/_users/org.couchdb.user:dave")
        assert headers["authorization"].startswith("Basic ")

    def test_duplicate_user(self, admin):
        response = admin.post("/api/users", json={"name": "alice", "password": "x"})
        assert response.status_code == 409
        assert response.json()["message"] == "User exists"

    @pytest.mark.parametrize("body", [{"name": "erin"}, {"password": "x"}, {}])
    def test_create_requires_name_and_password(self, admin, body):
        response = admin.post("/api/users", json=body)
        assert response.status_code == 400
        assert response.json()["message"] == "Username/Password required"

    def test_update_roles_apply_on_next_login(self, admin, alice, app):
        response = admin.patch("/api/users/alice", json={"roles": ["staff", "app:admin"]})
        assert response.status_code == 200
        assert response.json()["user"]["roles"] == ["staff", "app:admin"]

        # Existing session keeps the roles captured at login
        assert alice.get("/me").json()["user"]["roles"] == ["staff"]
        assert alice.get("/api/users").status_code == 403

        fresh = TestClient(app)
        login(fresh, "alice", "alicepw")
        assert fresh.get("/api/users").status_code == 200

    def test_update_password(self, admin, app):
        admin.patch("/api/users/alice", json={"password": "newpw"})
        c = TestClient(app)
        assert c.post("/login", json={"username": "alice", "password": "alicepw"}).status_code == 401
        assert c.post("/login", json={"username": "alice", "password": "newpw"}).status_code == 200

    def test_update_profile_leaves_roles(self, admin, couch):
        admin.patch("/api/users/alice", json={"phone": "555-0100"})
        doc = couch.dbs["_users"]["org.couchdb.user:alice"]
        assert doc["phone"] == "555-0100"
        assert doc["roles"] == ["staff"]

    def test_explicit_null_clears_profile_field(self, admin, couch):
        admin.patch("/api/users/alice", json={"phone": "555-0100", "department": "Ops", "email": "a@x.test"})

        response = admin.patch("/api/users/alice", json={"phone": None, "department": ""})

        assert response.status_code == 200
        doc = couch.dbs["_users"]["org.couchdb.user:alice"]
        assert doc["phone"] == ""
        assert doc["department"] == ""
        assert doc["email"] == "a@x.test"
        assert doc["password"] == "alicepw"

    def test_delete_user(self, admin, couch):
        assert admin.delete("/api/users/alice").json() == {"ok": True}
        assert "org.couchdb.user:alice" not in couch.dbs["_users"]
        assert admin.delete("/api/users/alice").status_code == 404

    def test_non_admin_forbidden(self, alice):
        for method, path in [("get", "/api/users"), ("delete", "/api/users/root")]:
            assert getattr(alice, method)(path).status_code == 403

    def test_anonymous(self, client):
        assert client.get("/api/users").status_code == 401


class TestWithoutAdminCredential:
    def test_user_admin_unavailable(self, no_admin_app):
        c = TestClient(no_admin_app)
        login(c, "root", "rootpw")
        response = c.get("/api/users")
        assert response.status_code == 502
        assert response.json() == {"ok": False, "message": "admin_not_configured"}

    def test_summary_degrades(self, no_admin_app):
        c = TestClient(no_admin_app)
        login(c, "alice", "alicepw")
        body = c.get("/api/summary").json()
        assert body["ok"] is True
        assert body["usersCount"] is None
        assert "security" not in c.get("/api/db-details").json()["details"]

    def test_events_still_work(self, no_admin_app):
        c = TestClient(no_admin_app)
        login(c, "alice", "alicepw")
        assert c.post("/api/events", json={"type": "checkin", "qrData": "x"}).status_code == 201
        assert len(c.get("/api/events").json()["rows"]) == 1
