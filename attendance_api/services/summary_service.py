# attendance_api/services/summary_service.py
"""
Dashboard figures for the primary database.
Anything that needs the admin credential (user count, _security) is simply
omitted when it is not configured.
"""

from typing import Optional

from attendance_api.database import CouchClient, CouchConnector, json_body
from attendance_api.exceptions import BackendUnavailable
from attendance_api.services.user_service import count_users
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)


async def backend_online(connector: CouchConnector) -> bool:
    """True when CouchDB answers /_up with status ok."""
    try:
        response = await connector.request("GET", "/_up")
    except BackendUnavailable:
        return False
    return response.status_code == 200 and json_body(response).get("status") == "ok"


async def summary(connector: CouchConnector, user: CouchClient, admin: Optional[CouchClient]) -> dict:
    online = await backend_online(connector)

    info = await user.db_info()
    data = json_body(info)
    sizes = data.get("sizes") or {}
    size_bytes = next((sizes[k] for k in ("file", "active", "external") if sizes.get(k) is not None), 0)

    return {
        "db": user.db,
        "sizeBytes": size_bytes,
        "docCount": data.get("doc_count") or 0,
        "usersCount": await count_users(admin),
        "online": online,
        "active": info.status_code == 200,
    }


async def db_details(user: CouchClient, admin: Optional[CouchClient]) -> dict:
    info = await user.db_info()
    if info.status_code != 200:
        raise BackendUnavailable("db_info_failed", status=info.status_code)
    details = json_body(info)

    if admin is not None:
        security = await admin.security()
        if security.status_code == 200:
            details["security"] = json_body(security)
        else:
            logger.warning(f"_security lookup answered HTTP {security.status_code}")
    return {"db": user.db, "details": details}
