from pydantic import BaseModel
from typing import Optional


class EventCreate(BaseModel):
    # Required-field checks happen in event_service so they share the error envelope
    type: Optional[str] = None
    qrData: Optional[str] = None
