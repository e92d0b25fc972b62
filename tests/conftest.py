# tests/conftest.py
"""Shared fixtures: a fake CouchDB, settings pointing at it, and API test clients."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

import pytest
from fastapi.testclient import TestClient

from attendance_api.database import CouchClient, CouchConnector
from attendance_api.main import create_app
from attendance_api.models.session import BackendCredential
from fake_couch import FakeCouch
from helpers import COUCH_URL, login, make_settings


@pytest.fixture
def couch():
    fake = FakeCouch()
    fake.add_user("alice", "alicepw", ["staff"])
    fake.add_user("root", "rootpw", ["app:admin"])
    return fake


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings, couch):
    return create_app(settings, transport=couch.transport())


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def alice(app):
    c = TestClient(app)
    login(c, "alice", "alicepw")
    return c


@pytest.fixture
def admin(app):
    c = TestClient(app)
    login(c, "root", "rootpw")
    return c


@pytest.fixture
def connector(couch):
    return CouchConnector(COUCH_URL, 5.0, transport=couch.transport())


@pytest.fixture
def admin_couch(connector):
    """CouchClient with the admin credential."""
    return CouchClient(connector, BackendCredential.basic("admin", "adminpw"), "attendance")
