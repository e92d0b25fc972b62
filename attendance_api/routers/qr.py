# attendance_api/routers/qr.py
from fastapi import APIRouter, Depends

from attendance_api.dependencies import require_admin
from attendance_api.schemas.qr import QrRequest
from attendance_api.services.qr_service import generate_badge

router = APIRouter()


@router.post("/admin/qr", dependencies=[Depends(require_admin)], summary="Generate an employee QR badge")
def create_badge(body: QrRequest):
    """PNG rendering is CPU-bound, so this runs in the threadpool (sync def)."""
    badge = generate_badge(
        username=body.username,
        employee_id=body.employeeId,
        full_name=body.fullName,
        department=body.department,
        phone=body.phone,
    )
    return {"ok": True, **badge}
