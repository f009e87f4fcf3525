"""Appointment domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

AppointmentStatus = Literal["scheduled", "completed", "cancelled"]
CountPeriod = Literal["day", "week", "month"]


class AppointmentCreate(BaseModel):
    patient_id: int
    professional_id: Optional[int] = None
    appointment_date: date
    appointment_time: time
    duration_minutes: int = 60
    status: AppointmentStatus = "scheduled"
    notes: Optional[str] = None

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v <= 0 or v > 24 * 60:
            raise ValueError("Duração inválida")
        return v


class AppointmentUpdate(BaseModel):
    patient_id: Optional[int] = None
    professional_id: Optional[int] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    duration_minutes: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    patient_name: Optional[str] = None
    professional_id: Optional[int] = None
    professional_name: Optional[str] = None
    appointment_date: date
    appointment_time: time
    duration_minutes: int
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfessionalCount(BaseModel):
    professional_id: Optional[int] = None
    professional_name: str
    count: int


class ProfessionalCountsResponse(BaseModel):
    period: str
    start_date: date
    end_date: date
    counts: list[ProfessionalCount]
