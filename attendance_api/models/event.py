# attendance_api/models/event.py
"""
Event and event-type records as stored in the primary CouchDB database.
Events:      {_id: "event:<uuid>", kind: "event", ts, type, qrData, createdBy}
Event types: {_id: "eventtype:<code>", kind: "event_type", code, name, active, updatedAt}
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

EVENT_KIND = "event"
EVENT_TYPE_KIND = "event_type"
EVENT_ID_PREFIX = "event:"
EVENT_TYPE_ID_PREFIX = "eventtype:"


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class EventRecord:
    id: str
    timestamp: str
    type_code: str
    payload: str
    created_by: str

    @classmethod
    def new(cls, type_code: str, payload: str, created_by: str) -> "EventRecord":
        return cls(
            id=f"{EVENT_ID_PREFIX}{uuid.uuid4()}",
            timestamp=utc_now_iso(),
            type_code=type_code,
            payload=payload,
            created_by=created_by,
        )

    @classmethod
    def from_doc(cls, doc: dict) -> "EventRecord":
        return cls(
            id=doc.get("_id", ""),
            timestamp=doc.get("ts") or "",
            type_code=doc.get("type") or "",
            payload=doc.get("qrData") or "",
            created_by=doc.get("createdBy") or "",
        )

    def to_doc(self) -> dict:
        return {
            "_id": self.id,
            "kind": EVENT_KIND,
            "ts": self.timestamp,
            "type": self.type_code,
            "qrData": self.payload,
            "createdBy": self.created_by,
        }

    def to_row(self) -> dict:
        """Shape returned by GET /api/events."""
        doc = self.to_doc()
        doc.pop("kind")
        return doc


@dataclass(frozen=True)
class EventTypeRecord:
    code: str
    display_name: str
    active: bool = True

    @staticmethod
    def doc_id(code: str) -> str:
        return f"{EVENT_TYPE_ID_PREFIX}{code}"

    @classmethod
    def from_doc(cls, doc: dict) -> "EventTypeRecord":
        code = doc.get("code") or str(doc.get("_id", "")).replace(EVENT_TYPE_ID_PREFIX, "", 1)
        return cls(code=code, display_name=doc.get("name") or code, active=doc.get("active") is not False)

    def to_doc(self) -> dict:
        return {
            "_id": self.doc_id(self.code),
            "kind": EVENT_TYPE_KIND,
            "code": self.code,
            "name": self.display_name,
            "active": self.active,
            "updatedAt": utc_now_iso(),
        }

    def to_row(self) -> dict:
        return {"code": self.code, "name": self.display_name, "active": self.active}


@dataclass
class EventPage:
    """One page of events; next_cursor is None on the final page."""
    rows: List[EventRecord] = field(default_factory=list)
    next_cursor: Optional[str] = None
