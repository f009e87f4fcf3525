"""Report domain schemas"""

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

ReportType = Literal["financial", "appointments", "patients", "custom"]


class ReportCreate(BaseModel):
    title: str
    description: Optional[str] = None
    report_type: ReportType
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None
    data: Optional[Any] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Título é obrigatório")
        return v.strip()

    @model_validator(mode="after")
    def validate_range(self):
        if self.date_range_start and self.date_range_end and self.date_range_start > self.date_range_end:
            raise ValueError("Data inicial maior que a data final")
        return self


class ReportUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    report_type: Optional[ReportType] = None
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None
    data: Optional[Any] = None


class ReportResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    report_type: str
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None
    data: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReportStats(BaseModel):
    total_appointments: int
    active_patients: int
    completion_rate: int


class MonthlyAppointments(BaseModel):
    month: str
    label: str
    appointments: int
    completed: int
    cancelled: int


class MonthlyPatientGrowth(BaseModel):
    month: str
    label: str
    new_patients: int
    total_patients: int
