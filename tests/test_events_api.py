# tests/test_events_api.py
"""API tests for recording and listing scanned events."""

import pytest
from fastapi.testclient import TestClient

from attendance_api.main import create_app
from helpers import login, make_settings


def seed(couch, count, **kwargs):
    for minute in range(count):
        couch.add_event(f"2026-04-01T07:{minute:02d}:00.000Z", **kwargs)


class TestCreateEvent:
    def test_create_event(self, alice, couch):
        response = alice.post("/api/events", json={"type": "checkin", "qrData": '{"uid":"alice"}'})

        assert response.status_code == 201
        event_id = response.json()["id"]
        assert event_id.startswith("event:")
        stored = couch.dbs["attendance"][event_id]
        assert stored["kind"] == "event"
        assert stored["createdBy"] == "alice"
        assert stored["ts"].endswith("Z")

    def test_written_with_callers_token(self, alice, couch):
        alice.post("/api/events", json={"type": "checkin", "qrData": "x"})
        method, path, headers = couch.requests[-1]
        assert method == "PUT"
        assert "AuthSession=" in headers["cookie"]
        assert "authorization" not in headers

    @pytest.mark.parametrize("body", [
        {"type": "checkin"},
        {"qrData": "x"},
        {"type": "", "qrData": "x"},
        {},
    ])
    def test_missing_fields(self, alice, body):
        response = alice.post("/api/events", json=body)
        assert response.status_code == 400
        assert response.json() == {"ok": False, "message": "type and qrData required"}

    def test_bad_type_code(self, alice):
        response = alice.post("/api/events", json={"type": "check in!", "qrData": "x"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid code"

    def test_anonymous(self, client, couch):
        response = client.post("/api/events", json={"type": "checkin", "qrData": "x"})
        assert response.status_code == 401
        assert couch.requests == []

    def test_expired_backend_session(self, alice, couch):
        couch.tokens.clear()
        response = alice.post("/api/events", json={"type": "checkin", "qrData": "x"})
        assert response.status_code == 401
        assert response.json()["message"] == "backend_session_expired"


class TestListEvents:
    def test_newest_first(self, alice, couch):
        seed(couch, 6)
        response = alice.get("/api/events")

        assert response.status_code == 200
        body = response.json()
        stamps = [r["ts"] for r in body["rows"]]
        assert stamps == sorted(stamps, reverse=True)
        assert body["bookmark"] is None
        assert set(body["rows"][0]) == {"_id", "ts", "type", "qrData", "createdBy"}

    def test_newest_first_without_index(self, alice, couch):
        seed(couch, 6)
        couch.sorted_queries_fail = True

        stamps = [r["ts"] for r in alice.get("/api/events").json()["rows"]]
        assert stamps == sorted(stamps, reverse=True)
        assert len(stamps) == 6

    @pytest.mark.parametrize("limit,sent,returned", [
        ("0", 25, 25), ("-5", 1, 1), ("1000", 100, 30), ("abc", 25, 25), ("7", 7, 7),
    ])
    def test_limit_is_clamped(self, alice, couch, limit, sent, returned):
        seed(couch, 30)
        rows = alice.get("/api/events", params={"limit": limit}).json()["rows"]
        assert len(rows) == returned
        assert couch.find_bodies[-1]["limit"] == sent

    def test_configured_default_page_size(self, couch):
        app = create_app(make_settings(DEFAULT_PAGE_SIZE=10), transport=couch.transport())
        c = TestClient(app)
        login(c, "alice", "alicepw")
        seed(couch, 30)
        assert len(c.get("/api/events").json()["rows"]) == 10
        assert len(c.get("/api/events", params={"limit": "abc"}).json()["rows"]) == 10

    def test_bookmark_paging(self, alice, couch):
        seed(couch, 30)
        first = alice.get("/api/events", params={"limit": 25}).json()
        assert len(first["rows"]) == 25
        assert first["bookmark"]

        second = alice.get("/api/events", params={"limit": 25, "bookmark": first["bookmark"]}).json()
        assert len(second["rows"]) == 5
        assert second["bookmark"] is None
        assert not {r["_id"] for r in first["rows"]} & {r["_id"] for r in second["rows"]}

    def test_filters(self, alice, couch):
        seed(couch, 3, type_code="checkin", created_by="alice")
        seed(couch, 2, type_code="late", created_by="bob")

        late = alice.get("/api/events", params={"type": "late"}).json()["rows"]
        assert [r["type"] for r in late] == ["late", "late"]

        mine = alice.get("/api/events", params={"createdBy": "alice"}).json()["rows"]
        assert {r["createdBy"] for r in mine} == {"alice"}
        assert len(mine) == 3

    def test_event_type_docs_not_listed(self, alice, couch):
        seed(couch, 2)
        couch.add_doc({"_id": "eventtype:late", "kind": "event_type", "code": "late", "name": "Late", "active": True})
        rows = alice.get("/api/events").json()["rows"]
        assert all(r["_id"].startswith("event:") for r in rows)

    def test_both_attempts_fail(self, alice, couch):
        couch.find_fails = True
        response = alice.get("/api/events")
        assert response.status_code == 502
        assert response.json() == {"ok": False, "message": "find_failed", "status": 500}

    def test_anonymous(self, client):
        assert client.get("/api/events").status_code == 401
