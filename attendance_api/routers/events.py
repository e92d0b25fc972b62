# attendance_api/routers/events.py
"""
Scanned events.
GET  /events — newest first, paged with an opaque bookmark
POST /events — record one scan for the signed-in user
"""

from typing import Optional

from fastapi import APIRouter, Depends

from attendance_api.config import Settings
from attendance_api.database import CouchClient
from attendance_api.dependencies import current_session, get_settings, get_user_client
from attendance_api.models.session import ApplicationSession
from attendance_api.schemas.event import EventCreate
from attendance_api.services.event_query import build_event_selector, list_events
from attendance_api.services.event_service import create_event

router = APIRouter()


@router.get("/events", summary="List events (bookmark paging)")
async def get_events(
    type: Optional[str] = None,
    createdBy: Optional[str] = None,
    limit: Optional[str] = None,
    bookmark: Optional[str] = None,
    client: CouchClient = Depends(get_user_client),
    settings: Settings = Depends(get_settings),
):
    """`limit` is taken as raw text; anything unusable falls back to the default page size."""
    page = await list_events(
        client, build_event_selector(type, createdBy), limit, bookmark,
        default_limit=settings.DEFAULT_PAGE_SIZE,
    )
    return {"ok": True, "rows": [e.to_row() for e in page.rows], "bookmark": page.next_cursor}


@router.post("/events", status_code=201, summary="Record a scanned event")
async def post_event(
    body: EventCreate,
    session: ApplicationSession = Depends(current_session),
    client: CouchClient = Depends(get_user_client),
):
    event = await create_event(client, body.type, body.qrData, session.user_name)
    return {"ok": True, "id": event.id}
