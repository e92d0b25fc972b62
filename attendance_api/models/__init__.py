# LAN Attendance: domain records
# Import all records here so callers can use attendance_api.models directly

from attendance_api.models.session import ApplicationSession, BackendCredential, SessionState  # noqa
from attendance_api.models.event import EventRecord, EventTypeRecord, EventPage                 # noqa
from attendance_api.models.user import UserRecord                                               # noqa
