"""Patient domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_cpf, validate_br_phone, validate_email

PatientStatus = Literal["active", "inactive"]
PaymentStatus = Literal["paid", "pending", "overdue"]


class PatientBase(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    cpf: Optional[str] = None
    date_of_birth: Optional[date] = None
    birthday: Optional[date] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    profile_photo_url: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    payment_due_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_br_phone(v)

    @field_validator("cpf")
    @classmethod
    def check_cpf(cls, v):
        return normalize_cpf(v)


class PatientCreate(PatientBase):
    """Schema for creating a new patient"""

    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Nome é obrigatório")
        return v.strip()


class PatientUpdate(PatientBase):
    """Schema for updating an existing patient"""

    name: Optional[str] = None
    status: Optional[PatientStatus] = None


class PatientNotesUpdate(BaseModel):
    notes: Optional[str] = None


class PatientPhotoUpdate(BaseModel):
    profile_photo_url: Optional[str] = None


class PatientStatusUpdate(BaseModel):
    status: PatientStatus


class PatientResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    cpf: Optional[str] = None
    date_of_birth: Optional[date] = None
    birthday: Optional[date] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    profile_photo_url: Optional[str] = None
    status: str
    payment_status: Optional[str] = None
    last_payment_date: Optional[datetime] = None
    payment_due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OverdueCheckResponse(BaseModel):
    notified: int
