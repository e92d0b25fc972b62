from pydantic import BaseModel


class QrRequest(BaseModel):
    username: str = ""
    fullName: str = ""
    employeeId: str = ""
    department: str = ""
    phone: str = ""
