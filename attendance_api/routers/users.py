# attendance_api/routers/users.py
"""User administration — needs both the admin role and the admin credential."""

from typing import Optional

from fastapi import APIRouter, Depends

from attendance_api.database import CouchClient
from attendance_api.dependencies import get_admin_client, require_admin
from attendance_api.models.user import PROFILE_FIELDS
from attendance_api.schemas.user import UserCreate, UserUpdate
from attendance_api.services import user_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/users", summary="List users")
async def list_users(admin: Optional[CouchClient] = Depends(get_admin_client)):
    users = await user_service.list_users(admin)
    return {"ok": True, "rows": [u.to_row() for u in users]}


@router.post("/users", status_code=201, summary="Create a user")
async def create_user(body: UserCreate, admin: Optional[CouchClient] = Depends(get_admin_client)):
    user = await user_service.create_user(
        admin, body.name, body.password, body.roles,
        fullName=body.fullName, email=body.email, department=body.department, phone=body.phone,
    )
    return {"ok": True, "user": user.to_row()}


@router.patch("/users/{name}", summary="Update roles, password or profile")
async def update_user(name: str, body: UserUpdate, admin: Optional[CouchClient] = Depends(get_admin_client)):
    # Keys absent from the request stay untouched; an explicit null clears a profile field
    sent = body.model_dump(exclude_unset=True)
    profile = {f: sent[f] for f in PROFILE_FIELDS if f in sent}
    user = await user_service.update_user(
        admin, name, roles=sent.get("roles"), password=sent.get("password"), **profile,
    )
    return {"ok": True, "user": user.to_row()}


@router.delete("/users/{name}", summary="Delete a user")
async def delete_user(name: str, admin: Optional[CouchClient] = Depends(get_admin_client)):
    await user_service.delete_user(admin, name)
    return {"ok": True}
