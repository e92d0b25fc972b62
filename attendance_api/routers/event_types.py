# attendance_api/routers/event_types.py
"""Event types — public list for filters plus admin CRUD."""

from fastapi import APIRouter, Depends

from attendance_api.database import CouchClient
from attendance_api.dependencies import get_user_client, require_admin
from attendance_api.schemas.event_type import EventTypeCreate, EventTypeUpdate
from attendance_api.services import event_type_service

router = APIRouter()


@router.get("/event-types", summary="Active event types")
async def list_active_types(client: CouchClient = Depends(get_user_client)):
    types = await event_type_service.list_event_types(client)
    return {"ok": True, "rows": [t.to_row() for t in types]}


@router.get("/admin/event-types", dependencies=[Depends(require_admin)], summary="All event types")
async def list_all_types(client: CouchClient = Depends(get_user_client)):
    types = await event_type_service.list_event_types(client, include_inactive=True)
    return {"ok": True, "rows": [t.to_row() for t in types]}


@router.post("/admin/event-types", status_code=201, dependencies=[Depends(require_admin)])
async def create_type(body: EventTypeCreate, client: CouchClient = Depends(get_user_client)):
    record = await event_type_service.create_event_type(client, body.code, body.name, body.active)
    return {"ok": True, "type": record.to_row()}


@router.patch("/admin/event-types/{code}", dependencies=[Depends(require_admin)])
async def update_type(code: str, body: EventTypeUpdate, client: CouchClient = Depends(get_user_client)):
    record = await event_type_service.update_event_type(client, code, body.name, body.active)
    return {"ok": True, "type": record.to_row()}


@router.delete("/admin/event-types/{code}", dependencies=[Depends(require_admin)])
async def delete_type(code: str, client: CouchClient = Depends(get_user_client)):
    await event_type_service.delete_event_type(client, code)
    return {"ok": True}
