# attendance_api/routers/auth.py
"""
Login / logout / current session.
POST /login  — JSON or form body {username, password}
POST /logout — always succeeds, revokes the CouchDB session best-effort
GET  /me     — the signed-in user and the roles captured at login
"""

from fastapi import APIRouter, Depends, Request

from attendance_api.dependencies import current_session, get_session_bridge
from attendance_api.models.session import ApplicationSession
from attendance_api.schemas.auth import LoginRequest
from attendance_api.services.credential_resolver import SESSION_KEY, session_for_request
from attendance_api.services.session_bridge import SessionBridge

router = APIRouter()


async def _read_credentials(request: Request) -> LoginRequest:
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            data = {}
    else:
        data = dict(await request.form())
    if not isinstance(data, dict):
        data = {}
    return LoginRequest(username=str(data.get("username") or ""), password=str(data.get("password") or ""))


@router.post("/login", summary="Sign in with CouchDB credentials")
async def login(request: Request, bridge: SessionBridge = Depends(get_session_bridge)):
    creds = await _read_credentials(request)
    previous = session_for_request(request)
    session = await bridge.login(creds.username, creds.password)
    if previous is not None:
        # The replaced session and its CouchDB token go away together
        await bridge.logout(previous)

    # Fresh cookie payload on every login; it only ever carries the repository key
    request.session.clear()
    request.session[SESSION_KEY] = session.session_id
    return {"ok": True, "user": session.to_public()}


@router.post("/logout", summary="Sign out")
async def logout(request: Request, bridge: SessionBridge = Depends(get_session_bridge)):
    await bridge.logout(session_for_request(request))
    request.session.clear()
    return {"ok": True}


@router.get("/me", summary="Current session")
def me(session: ApplicationSession = Depends(current_session)):
    return {"ok": True, "user": session.to_public()}
