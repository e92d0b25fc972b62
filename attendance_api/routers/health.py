# attendance_api/routers/health.py
"""
System health check endpoint.
Returns status of the API + CouchDB reachability + primary database.
"""

import requests
from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from attendance_api.config import Settings
from attendance_api.dependencies import get_settings

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(settings: Settings = Depends(get_settings)):
    """
    Returns:
    - Backend status
    - CouchDB reachability (/_up)
    - Whether an admin credential is configured
    """
    result = {
        "ok": True,
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": "ok",
        "couchdb": "unknown",
        "database": settings.PRIMARY_DB,
        "adminConfigured": settings.HAS_ADMIN_CREDENTIAL,
    }

    try:
        resp = requests.get(f"{settings.COUCH_URL.rstrip('/')}/_up", timeout=3)
        if resp.status_code == 200:
            result["couchdb"] = "ok"
        else:
            result["couchdb"] = f"http_{resp.status_code}"
            result["status"] = "degraded"
    except requests.exceptions.ConnectionError:
        result["couchdb"] = "unreachable"
        result["status"] = "degraded"
    except requests.exceptions.RequestException as e:
        result["couchdb"] = f"error: {e}"
        result["status"] = "degraded"

    return result
