from pydantic import BaseModel
from typing import Optional


class EventTypeCreate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    active: Optional[bool] = True


class EventTypeUpdate(BaseModel):
    name: Optional[str] = None
    active: Optional[bool] = None
