# attendance_api/services/credential_resolver.py
"""
Credential resolver — picks which CouchDB identity a request talks as.

user:  the caller's own AuthSession token, replayed from their ApplicationSession
admin: the administrative credential from settings, or None when not configured.
       None means "feature unavailable": callers degrade instead of failing.
"""

from typing import Optional

from fastapi import Request

from attendance_api.database import CouchClient, CouchConnector
from attendance_api.exceptions import Unauthenticated
from attendance_api.models.session import ApplicationSession, BackendCredential

USER_SCOPE = "user"
ADMIN_SCOPE = "admin"
SESSION_KEY = "sid"


def session_for_request(request: Request) -> Optional[ApplicationSession]:
    """Live ApplicationSession referenced by the request's signed cookie, if any."""
    session_id = request.session.get(SESSION_KEY)
    if not session_id:
        return None
    return request.app.state.sessions.get(session_id)


def user_client(connector: CouchConnector, session: Optional[ApplicationSession], db: str) -> CouchClient:
    if session is None or not session.is_active():
        raise Unauthenticated()
    return CouchClient(connector, session.credential, db)


def admin_client(connector: CouchConnector, settings, db: Optional[str] = None) -> Optional[CouchClient]:
    if not settings.HAS_ADMIN_CREDENTIAL:
        return None
    credential = BackendCredential.basic(settings.COUCH_ADMIN_USER, settings.COUCH_ADMIN_PASS)
    return CouchClient(connector, credential, db or settings.PRIMARY_DB)


def resolve_client(request: Request, scope: str = USER_SCOPE) -> Optional[CouchClient]:
    state = request.app.state
    if scope == ADMIN_SCOPE:
        return admin_client(state.couch, state.settings)
    if scope == USER_SCOPE:
        return user_client(state.couch, session_for_request(request), state.settings.PRIMARY_DB)
    raise ValueError(f"Unknown credential scope: {scope!r}")
