# attendance_api/services/user_service.py
"""
User administration against CouchDB's _users database.
Always runs with the administrative credential; callers pass None when it is
not configured and get AdminUnavailable back.
"""

import json
from typing import List, Optional

from attendance_api.database import OK_WRITE, USERS_DB, CouchClient, json_body, raise_for_backend
from attendance_api.exceptions import AdminUnavailable, Conflict, ValidationError
from attendance_api.models.user import PROFILE_FIELDS, UserRecord, USER_ID_PREFIX
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)

# _all_docs key range covering every org.couchdb.user:* id
USER_RANGE = {
    "startkey": json.dumps(USER_ID_PREFIX),
    "endkey": json.dumps("org.couchdb.user;\uffff"),
}


def normalize_roles(roles) -> List[str]:
    """Roles arrive as a list or as a comma-separated string."""
    if isinstance(roles, (list, tuple, set, frozenset)):
        return [str(r).strip() for r in roles if str(r).strip()]
    return [r.strip() for r in str(roles or "").split(",") if r.strip()]


def _require(admin: Optional[CouchClient]) -> CouchClient:
    if admin is None:
        raise AdminUnavailable()
    return admin


async def count_users(admin: Optional[CouchClient]) -> Optional[int]:
    """Number of user documents, or None when the admin credential is unavailable."""
    if admin is None:
        return None
    response = await admin.all_docs(USERS_DB, {**USER_RANGE, "include_docs": "false"})
    rows = json_body(response).get("rows")
    return len(rows) if response.status_code == 200 and isinstance(rows, list) else None


async def list_users(admin: Optional[CouchClient]) -> List[UserRecord]:
    admin = _require(admin)
    response = await admin.all_docs(USERS_DB, {**USER_RANGE, "include_docs": "true"})
    raise_for_backend(response, "list_users")
    users = [UserRecord.from_doc(r.get("doc") or {}) for r in json_body(response).get("rows") or []]
    return [u for u in users if u.name]


async def create_user(admin: Optional[CouchClient], name, password, roles=None, **profile) -> UserRecord:
    if not name or not password:
        raise ValidationError("Username/Password required")
    admin = _require(admin)

    name = str(name)
    user = UserRecord(name=name, roles=normalize_roles(roles),
                      **{f: str(profile.get(f) or "") for f in PROFILE_FIELDS})
    doc = {"_id": UserRecord.doc_id(name), "type": "user", "password": str(password), **user.to_row()}

    response = await admin.put_doc(doc, db=USERS_DB)
    if response.status_code == 409:
        raise Conflict("User exists")
    raise_for_backend(response, "create_user", ok=OK_WRITE)
    logger.info(f"User '{name}' created roles={user.roles}")
    return user


async def update_user(admin: Optional[CouchClient], name, roles=None, password=None, **profile) -> UserRecord:
    """
    Fetch → modify → put. Profile fields are replaced only when passed;
    passing None or "" clears one. roles=None and an empty password keep the stored values.
    """
    admin = _require(admin)
    doc_id = UserRecord.doc_id(str(name))
    current = await admin.get_doc(doc_id, db=USERS_DB)
    raise_for_backend(current, "get_user")

    doc = json_body(current)
    if roles is not None:
        doc["roles"] = normalize_roles(roles)
    if password:
        doc["password"] = str(password)
    for f in PROFILE_FIELDS:
        if f in profile:
            doc[f] = str(profile[f] or "")

    response = await admin.put_doc(doc, db=USERS_DB)
    raise_for_backend(response, "update_user", ok=OK_WRITE)
    logger.info(f"User '{name}' updated")
    return UserRecord.from_doc(doc)


async def delete_user(admin: Optional[CouchClient], name) -> None:
    admin = _require(admin)
    doc_id = UserRecord.doc_id(str(name))
    current = await admin.get_doc(doc_id, db=USERS_DB)
    raise_for_backend(current, "get_user")

    response = await admin.delete_doc(doc_id, json_body(current).get("_rev", ""), db=USERS_DB)
    raise_for_backend(response, "delete_user", ok=(200, 202))
    logger.info(f"User '{name}' deleted")
