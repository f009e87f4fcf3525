"""Attendance domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel

AttendanceStatus = Literal["present", "absent", "late", "cancelled"]


class AttendanceUpsert(BaseModel):
    patient_id: int
    session_date: date
    status: AttendanceStatus
    payment_id: Optional[int] = None
    notes: Optional[str] = None


class AttendanceResponse(BaseModel):
    id: int
    patient_id: int
    session_date: date
    status: str
    payment_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendanceStats(BaseModel):
    total: int
    present: int
    absent: int
    late: int
    cancelled: int
    paid: int
    attendance_rate: float
