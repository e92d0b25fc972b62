from pydantic import BaseModel
from typing import List, Optional, Union


class UserProfile(BaseModel):
    fullName: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None


class UserCreate(UserProfile):
    name: Optional[str] = None
    password: Optional[str] = None
    roles: Union[List[str], str, None] = None   # list or "a, b"


class UserUpdate(UserProfile):
    roles: Union[List[str], str, None] = None
    password: Optional[str] = None
