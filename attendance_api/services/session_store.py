# attendance_api/services/session_store.py
"""
Session repository: where ApplicationSessions live between requests.
Injected through app.state; request handlers never reach a module global.
Swap InMemorySessionRepository for an external store by implementing the protocol.

An expired session stops resolving at once but stays stored until
pop_expired() hands it to the session bridge, which revokes its CouchDB
token before dropping it.
"""

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from attendance_api.models.session import ApplicationSession
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)


class SessionRepository(Protocol):
    def get(self, session_id: str) -> Optional[ApplicationSession]: ...

    def set(self, session: ApplicationSession) -> None: ...

    def destroy(self, session_id: str) -> Optional[ApplicationSession]: ...

    def pop_expired(self, now: Optional[datetime] = None) -> List[ApplicationSession]: ...


class InMemorySessionRepository:
    """Process-local map of session id → ApplicationSession with lazy expiry."""

    def __init__(self):
        self._sessions: Dict[str, ApplicationSession] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[ApplicationSession]:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None or not session.is_active():
            return None
        return session

    def set(self, session: ApplicationSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def destroy(self, session_id: str) -> Optional[ApplicationSession]:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.destroy()
        return session

    def pop_expired(self, now: Optional[datetime] = None) -> List[ApplicationSession]:
        """Remove and return expired sessions; their backend tokens are still live."""
        now = now or datetime.now(timezone.utc)
        with self._lock:
            expired = [s for s in self._sessions.values() if not s.is_active(now)]
            for session in expired:
                del self._sessions[session.session_id]
        for session in expired:
            logger.info(f"Session for '{session.user_name}' expired")
        return expired

    def __len__(self) -> int:
        return len(self._sessions)
