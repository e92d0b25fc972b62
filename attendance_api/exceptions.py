# attendance_api/exceptions.py
"""
Error taxonomy shared by services and routers.
Every backend failure is mapped to one of these before it leaves a service;
main.py renders them into the {ok: false, message} envelope.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    message = "internal_error"

    def __init__(self, message: Optional[str] = None, **extra):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"ok": False, "message": self.message, **self.extra}


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid credentials"


class Unauthenticated(AppError):
    status_code = 401
    message = "unauthenticated"


class Forbidden(AppError):
    status_code = 403
    message = "forbidden"


class ValidationError(AppError):
    status_code = 400
    message = "invalid_request"


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class Conflict(AppError):
    status_code = 409
    message = "conflict"


class BackendUnavailable(AppError):
    status_code = 502
    message = "backend_unavailable"


class AdminUnavailable(BackendUnavailable):
    """No administrative credential is configured."""
    message = "admin_not_configured"


class QueryFailed(AppError):
    status_code = 502
    message = "find_failed"

    def __init__(self, status: Optional[int] = None, message: Optional[str] = None):
        super().__init__(message, status=status)
        self.status = status
