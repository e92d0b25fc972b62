# attendance_api/dependencies.py
"""FastAPI dependencies — auth guards and per-request CouchDB clients."""

from typing import Optional

from fastapi import Depends, Request

from attendance_api.config import Settings
from attendance_api.database import CouchClient
from attendance_api.exceptions import Forbidden, Unauthenticated
from attendance_api.models.session import ApplicationSession
from attendance_api.services.credential_resolver import (
    ADMIN_SCOPE, USER_SCOPE, resolve_client, session_for_request,
)
from attendance_api.services.session_bridge import SessionBridge


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_bridge(request: Request) -> SessionBridge:
    return request.app.state.bridge


def current_session(request: Request) -> ApplicationSession:
    """Auth guard: the caller's live ApplicationSession or 401."""
    session = session_for_request(request)
    if session is None:
        raise Unauthenticated()
    return session


def require_admin(request: Request, session: ApplicationSession = Depends(current_session)) -> ApplicationSession:
    if not session.has_role(request.app.state.settings.ADMIN_ROLE):
        raise Forbidden()
    return session


def get_user_client(request: Request, session: ApplicationSession = Depends(current_session)) -> CouchClient:
    return resolve_client(request, USER_SCOPE)


def get_admin_client(request: Request) -> Optional[CouchClient]:
    return resolve_client(request, ADMIN_SCOPE)
