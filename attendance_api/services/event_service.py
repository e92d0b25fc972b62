# attendance_api/services/event_service.py
"""Records scanned events. Events are immutable once written."""

from attendance_api.database import OK_WRITE, CouchClient, raise_for_backend
from attendance_api.exceptions import ValidationError
from attendance_api.models.event import EventRecord
from attendance_api.services.event_type_service import validate_code
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)


async def create_event(client: CouchClient, type_code, payload, created_by: str) -> EventRecord:
    if not type_code or not payload:
        raise ValidationError("type and qrData required")
    event = EventRecord.new(validate_code(type_code), str(payload), created_by or "unknown")

    response = await client.put_doc(event.to_doc())
    raise_for_backend(response, "create_event", ok=OK_WRITE)
    logger.info(f"Event {event.id} type={event.type_code} by={event.created_by}")
    return event
