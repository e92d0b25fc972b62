# attendance_api/services/qr_service.py
"""
Employee QR badge generator.
The badge encodes a compact JSON payload that the scanner page records as an
event's qrData.
"""

import base64
import io
import json
import re

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from attendance_api.exceptions import ValidationError
from attendance_api.models.event import utc_now_iso

PAYLOAD_VERSION = 1
_UNSAFE_FILENAME = re.compile(r"[^\w.-]+")


def build_payload(username, employee_id, full_name="", department="", phone="") -> dict:
    if not str(username or "").strip() or not str(employee_id or "").strip():
        raise ValidationError("username and employeeId are required")
    return {
        "v": PAYLOAD_VERSION,
        "uid": str(username).strip(),
        "eid": str(employee_id).strip(),
        "n": str(full_name or "").strip(),
        "d": str(department or "").strip(),
        "p": str(phone or "").strip(),
        "iat": utc_now_iso(),
    }


def badge_filename(payload: dict) -> str:
    return _UNSAFE_FILENAME.sub("_", f"qr_{payload['uid']}_{payload['eid']}.png")


def render_png(text: str) -> bytes:
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=8, border=2)
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image()
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue()


def generate_badge(**fields) -> dict:
    payload = build_payload(**fields)
    png = render_png(json.dumps(payload, separators=(",", ":")))
    data_url = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
    return {
        "filename": badge_filename(payload),
        "mime": "image/png",
        "sizeHint": len(data_url),
        "payload": payload,
        "dataUrl": data_url,
    }
