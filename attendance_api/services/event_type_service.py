# attendance_api/services/event_type_service.py
"""
Event-type administration.
Codes are the primary key (immutable); name and active are editable through
fetch → modify → put with the current _rev. A concurrent writer makes the put
fail with Conflict; nothing is retried here.
"""

import re
from typing import List, Optional

from attendance_api.database import OK_WRITE, CouchClient, json_body, raise_for_backend
from attendance_api.exceptions import Conflict, ValidationError
from attendance_api.models.event import EVENT_TYPE_KIND, EventTypeRecord, utc_now_iso
from attendance_api.services.event_query import FindQuery, run_find
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)

CODE_PATTERN = re.compile(r"^[a-z0-9._-]+$", re.IGNORECASE)
LIST_LIMIT = 1000


def validate_code(code) -> str:
    code = str(code or "").strip()
    if not code or not CODE_PATTERN.match(code):
        raise ValidationError("Invalid code")
    return code


async def list_event_types(client: CouchClient, include_inactive: bool = False) -> List[EventTypeRecord]:
    """Event types by name. Regular consumers only see active ones."""
    selector = {"kind": EVENT_TYPE_KIND}
    if not include_inactive:
        # Mango's $ne skips documents without the field; those count as active
        selector["$or"] = [{"active": {"$exists": False}}, {"active": {"$ne": False}}]
    query = FindQuery(
        selector=selector,
        sort_field="name",
        limit=LIST_LIMIT,
        fields=["_id", "code", "name", "active"],
    )
    result = await run_find(client, query)
    return [EventTypeRecord.from_doc(d) for d in result.docs]


async def create_event_type(client: CouchClient, code, name=None, active: Optional[bool] = True) -> EventTypeRecord:
    code = validate_code(code)
    record = EventTypeRecord(code=code, display_name=str(name or code), active=active is not False)
    response = await client.put_doc(record.to_doc())
    if response.status_code == 409:
        raise Conflict("Type exists")
    raise_for_backend(response, "create_event_type", ok=OK_WRITE)
    logger.info(f"Event type '{code}' created (active={record.active})")
    return record


async def update_event_type(client: CouchClient, code, name=None, active: Optional[bool] = None) -> EventTypeRecord:
    code = str(code or "").strip()
    doc_id = EventTypeRecord.doc_id(code)
    current = await client.get_doc(doc_id)
    raise_for_backend(current, "get_event_type")

    doc = json_body(current)
    if name is not None:
        doc["name"] = str(name or code)
    if active is not None:
        doc["active"] = bool(active)
    doc["updatedAt"] = utc_now_iso()

    response = await client.put_doc(doc)
    raise_for_backend(response, "update_event_type", ok=OK_WRITE)
    logger.info(f"Event type '{code}' updated")
    return EventTypeRecord.from_doc(doc)


async def delete_event_type(client: CouchClient, code) -> None:
    code = str(code or "").strip()
    doc_id = EventTypeRecord.doc_id(code)
    current = await client.get_doc(doc_id)
    raise_for_backend(current, "get_event_type")

    response = await client.delete_doc(doc_id, json_body(current).get("_rev", ""))
    raise_for_backend(response, "delete_event_type", ok=(200, 202))
    logger.info(f"Event type '{code}' deleted")
