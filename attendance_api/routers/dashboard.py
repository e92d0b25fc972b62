# attendance_api/routers/dashboard.py
"""Database summary and details for the dashboard header."""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from attendance_api.database import CouchClient
from attendance_api.dependencies import get_admin_client, get_user_client
from attendance_api.services import summary_service

router = APIRouter()


@router.get("/summary", summary="Size, document count, users, online state")
async def get_summary(
    request: Request,
    client: CouchClient = Depends(get_user_client),
    admin: Optional[CouchClient] = Depends(get_admin_client),
):
    data = await summary_service.summary(request.app.state.couch, client, admin)
    return {"ok": True, **data}


@router.get("/db-details", summary="Raw database info (+ _security with admin)")
async def get_db_details(
    client: CouchClient = Depends(get_user_client),
    admin: Optional[CouchClient] = Depends(get_admin_client),
):
    return {"ok": True, **await summary_service.db_details(client, admin)}
