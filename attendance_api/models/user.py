# attendance_api/models/user.py
"""Users live in CouchDB's _users database as org.couchdb.user:<name>."""

from dataclasses import dataclass, field
from typing import List

USER_ID_PREFIX = "org.couchdb.user:"
PROFILE_FIELDS = ("fullName", "email", "department", "phone")


@dataclass
class UserRecord:
    name: str
    roles: List[str] = field(default_factory=list)
    fullName: str = ""
    email: str = ""
    department: str = ""
    phone: str = ""

    @staticmethod
    def doc_id(name: str) -> str:
        return f"{USER_ID_PREFIX}{name}"

    @classmethod
    def from_doc(cls, doc: dict) -> "UserRecord":
        return cls(
            name=doc.get("name") or "",
            roles=list(doc.get("roles") or []),
            **{f: doc.get(f) or "" for f in PROFILE_FIELDS},
        )

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "roles": self.roles,
            "fullName": self.fullName,
            "email": self.email,
            "department": self.department,
            "phone": self.phone,
        }
