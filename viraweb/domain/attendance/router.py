"""Attendance router - FastAPI endpoints for attendance"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import AttendanceResponse, AttendanceStats, AttendanceUpsert
from .service import AttendanceService

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


def get_attendance_service(db: Session = Depends(get_db)) -> AttendanceService:
    """Dependency injection for AttendanceService"""
    return AttendanceService(db)


@router.get("/patients/{patient_id}", response_model=list[AttendanceResponse])
async def list_attendance(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.list_for_patient(patient_id, current_user)


@router.get("/patients/{patient_id}/stats", response_model=AttendanceStats)
async def get_attendance_stats(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_stats(patient_id, current_user)


@router.put("", response_model=AttendanceResponse)
async def upsert_attendance(
    data: AttendanceUpsert,
    current_user: User = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service),
):
    """Record attendance; a second write for the same patient and day overwrites the first"""
    return service.upsert(data, current_user)
