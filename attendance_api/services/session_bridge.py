# attendance_api/services/session_bridge.py
"""
Session bridge — exchanges application credentials for a CouchDB session.

login:  POST /_session → AuthSession token + roles → new ApplicationSession
logout: DELETE /_session (best effort) → session destroyed and removed
expiry: tokens of sessions past their TTL are revoked on the next login

Roles are captured at login and only refreshed by the next login; an
administrator's role change reaches a user when they sign in again.
"""

from typing import Optional

from attendance_api.database import CouchConnector, json_body
from attendance_api.exceptions import BackendUnavailable, InvalidCredentials, ValidationError
from attendance_api.models.session import ApplicationSession, BackendCredential
from attendance_api.services.session_store import SessionRepository
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)

AUTH_COOKIE = "AuthSession"


def extract_auth_token(set_cookie_headers) -> Optional[str]:
    """Value of the AuthSession cookie among Set-Cookie headers, if any."""
    prefix = f"{AUTH_COOKIE}="
    for header in set_cookie_headers:
        header = header.strip()
        if header.startswith(prefix):
            return header.split(";", 1)[0][len(prefix):] or None
    return None


def extract_roles(data: dict) -> frozenset:
    roles = data.get("roles")
    if not isinstance(roles, list):
        roles = (data.get("userCtx") or {}).get("roles") or []
    return frozenset(str(r) for r in roles)


class SessionBridge:
    def __init__(self, connector: CouchConnector, sessions: SessionRepository, ttl_seconds: int):
        self.connector = connector
        self.sessions = sessions
        self.ttl_seconds = ttl_seconds

    async def login(self, username: str, password: str) -> ApplicationSession:
        if not username or not password:
            raise ValidationError("Missing credentials")

        try:
            response = await self.connector.request(
                "POST", "/_session", data={"name": username, "password": password},
            )
        except BackendUnavailable:
            logger.warning(f"Login for '{username}' failed: backend unreachable")
            raise

        if response.status_code >= 500:
            logger.warning(f"Login for '{username}' failed: CouchDB HTTP {response.status_code}")
            raise BackendUnavailable("login_failed")

        data = json_body(response)
        if response.status_code != 200 or not data.get("ok"):
            # Unknown user and wrong password look the same from here on
            logger.info(f"Login rejected for '{username}' (HTTP {response.status_code})")
            raise InvalidCredentials()

        token = extract_auth_token(response.headers.get_list("set-cookie"))
        if not token:
            logger.error(f"Login for '{username}': CouchDB sent no {AUTH_COOKIE} cookie")
            raise BackendUnavailable("login_failed")

        name = data.get("name") or (data.get("userCtx") or {}).get("name") or username
        session = ApplicationSession(
            user_name=name,
            roles=extract_roles(data),
            credential=BackendCredential.session_token(token),
            ttl_seconds=self.ttl_seconds,
        )
        await self.revoke_expired()
        self.sessions.set(session)
        logger.info(f"Login: '{name}' roles={sorted(session.roles)}")
        return session

    async def logout(self, session: Optional[ApplicationSession]) -> None:
        """Always succeeds; a failed backend revocation is only logged."""
        if session is None:
            return
        try:
            await self._revoke(session)
        finally:
            self.sessions.destroy(session.session_id)
            session.destroy()
            logger.info(f"Logout: '{session.user_name}'")

    async def revoke_expired(self) -> int:
        """Revoke the CouchDB tokens of sessions that outlived their TTL."""
        expired = self.sessions.pop_expired()
        for session in expired:
            try:
                await self._revoke(session)
            finally:
                session.destroy()
        return len(expired)

    async def _revoke(self, session: ApplicationSession) -> None:
        try:
            response = await self.connector.request("DELETE", "/_session", credential=session.credential)
        except BackendUnavailable as e:
            logger.warning(f"Revoke for '{session.user_name}' failed ({e.message})")
            return
        if response.status_code != 200:
            logger.warning(f"Revoke for '{session.user_name}' answered HTTP {response.status_code}")
