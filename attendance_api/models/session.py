# attendance_api/models/session.py
"""
Application session and the backend credential it carries.
The session lives in a SessionRepository; the browser cookie only holds its id.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class BackendCredential:
    """How a backend call authenticates: a replayed AuthSession token or basic auth."""
    kind: str                       # session | basic
    token: Optional[str] = field(default=None, repr=False)
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    @classmethod
    def session_token(cls, token: str) -> "BackendCredential":
        return cls(kind="session", token=token)

    @classmethod
    def basic(cls, username: str, password: str) -> "BackendCredential":
        return cls(kind="basic", username=username, password=password)

    @property
    def headers(self) -> dict:
        if self.kind == "session" and self.token:
            return {"Cookie": f"AuthSession={self.token}"}
        return {}

    @property
    def auth(self) -> Optional[Tuple[str, str]]:
        if self.kind == "basic":
            return (self.username, self.password)
        return None


def _new_session_id() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class ApplicationSession:
    user_name: str
    roles: frozenset
    credential: BackendCredential
    ttl_seconds: int
    session_id: str = field(default_factory=_new_session_id)
    state: SessionState = SessionState.AUTHENTICATED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def expires_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.ttl_seconds)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.state == SessionState.AUTHENTICATED and now < self.expires_at

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def destroy(self):
        self.state = SessionState.DESTROYED

    def to_public(self) -> dict:
        return {"name": self.user_name, "roles": sorted(self.roles)}
