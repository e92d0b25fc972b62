# tests/test_event_types_api.py
"""API and service tests for event-type administration."""

import httpx
import pytest

from attendance_api.database import CouchClient, CouchConnector
from attendance_api.exceptions import Conflict
from attendance_api.models.session import BackendCredential
from attendance_api.services import event_type_service
from fake_couch import _matches as matches
from helpers import COUCH_URL


def seed_types(couch):
    couch.add_doc({"_id": "eventtype:checkin", "kind": "event_type", "code": "checkin", "name": "Check in", "active": True})
    couch.add_doc({"_id": "eventtype:break", "kind": "event_type", "code": "break", "name": "Break", "active": True})
    couch.add_doc({"_id": "eventtype:old", "kind": "event_type", "code": "old", "name": "Old", "active": False})


class TestListing:
    def test_active_only_sorted_by_name(self, alice, couch):
        seed_types(couch)
        rows = alice.get("/api/event-types").json()["rows"]
        assert rows == [
            {"code": "break", "name": "Break", "active": True},
            {"code": "checkin", "name": "Check in", "active": True},
        ]

    def test_admin_sees_inactive(self, admin, couch):
        seed_types(couch)
        rows = admin.get("/api/admin/event-types").json()["rows"]
        assert {"code": "old", "name": "Old", "active": False} in rows

    def test_missing_active_counts_as_active(self, alice, couch):
        couch.add_doc({"_id": "eventtype:legacy", "kind": "event_type", "name": "Legacy"})
        couch.add_doc({"_id": "eventtype:gone", "kind": "event_type", "name": "Gone", "active": False})
        rows = alice.get("/api/event-types").json()["rows"]
        assert rows == [{"code": "legacy", "name": "Legacy", "active": True}]

    def test_selector_keeps_docs_without_active(self, alice, couch):
        couch.add_doc({"_id": "eventtype:legacy", "kind": "event_type", "name": "Legacy"})
        alice.get("/api/event-types")
        selector = couch.find_bodies[-1]["selector"]
        assert "active" not in selector
        assert {"active": {"$exists": False}} in selector["$or"]

        legacy = couch.dbs["attendance"]["eventtype:legacy"]
        assert not matches(legacy, {"active": {"$ne": False}})
        assert matches(legacy, selector)

    def test_admin_listing_requires_role(self, alice):
        response = alice.get("/api/admin/event-types")
        assert response.status_code == 403
        assert response.json() == {"ok": False, "message": "forbidden"}


class TestLifecycle:
    def test_create_duplicate_deactivate(self, admin, alice):
        created = admin.post("/api/admin/event-types", json={"code": "late", "name": "Late"})
        assert created.status_code == 201
        assert created.json()["type"] == {"code": "late", "name": "Late", "active": True}

        again = admin.post("/api/admin/event-types", json={"code": "late", "name": "Late"})
        assert again.status_code == 409
        assert again.json()["message"] == "Type exists"

        patched = admin.patch("/api/admin/event-types/late", json={"active": False})
        assert patched.status_code == 200
        assert patched.json()["type"] == {"code": "late", "name": "Late", "active": False}

        assert "late" not in [r["code"] for r in alice.get("/api/event-types").json()["rows"]]
        everything = admin.get("/api/admin/event-types").json()["rows"]
        assert {"code": "late", "name": "Late", "active": False} in everything

    def test_rename_keeps_code(self, admin, couch):
        admin.post("/api/admin/event-types", json={"code": "wfh"})
        response = admin.patch("/api/admin/event-types/wfh", json={"name": "Work from home"})
        assert response.json()["type"] == {"code": "wfh", "name": "Work from home", "active": True}
        assert couch.dbs["attendance"]["eventtype:wfh"]["_rev"].startswith("2-")

    def test_name_defaults_to_code(self, admin):
        response = admin.post("/api/admin/event-types", json={"code": "overtime"})
        assert response.json()["type"]["name"] == "overtime"

    def test_delete(self, admin, couch):
        admin.post("/api/admin/event-types", json={"code": "temp"})
        assert admin.delete("/api/admin/event-types/temp").json() == {"ok": True}
        assert "eventtype:temp" not in couch.dbs["attendance"]

    @pytest.mark.parametrize("code", ["", "has space", "semi;colon", "ümlaut"])
    def test_invalid_code(self, admin, code):
        response = admin.post("/api/admin/event-types", json={"code": code, "name": "x"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid code"

    def test_unknown_code(self, admin):
        assert admin.patch("/api/admin/event-types/nope", json={"active": False}).status_code == 404
        assert admin.delete("/api/admin/event-types/nope").status_code == 404

    def test_non_admin_cannot_write(self, alice, couch):
        response = alice.post("/api/admin/event-types", json={"code": "late"})
        assert response.status_code == 403
        assert "eventtype:late" not in couch.dbs["attendance"]


class TestConcurrentUpdate:
    @pytest.mark.asyncio
    async def test_conflict_on_stale_revision(self, couch):
        couch.add_doc({"_id": "eventtype:late", "kind": "event_type", "code": "late", "name": "Late", "active": True})

        def racing(request: httpx.Request) -> httpx.Response:
            # Another writer lands between our read and our write
            if request.method == "PUT":
                current = couch.dbs["attendance"]["eventtype:late"]
                couch.add_doc(dict(current, name="Someone else"))
            return couch.handle(request)

        connector = CouchConnector(COUCH_URL, 5.0, transport=httpx.MockTransport(racing))
        client = CouchClient(connector, BackendCredential.basic("admin", "adminpw"), "attendance")

        with pytest.raises(Conflict):
            await event_type_service.update_event_type(client, "late", active=False)
        assert couch.dbs["attendance"]["eventtype:late"]["name"] == "Someone else"
