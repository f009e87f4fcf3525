"""Professional domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_br_phone, validate_email

WEEKDAYS = ["segunda", "terca", "quarta", "quinta", "sexta", "sabado", "domingo"]

ProfessionalStatus = Literal["active", "inactive"]


def _check_work_days(days: Optional[list[str]]) -> Optional[list[str]]:
    if days is None:
        return None
    normalized = [d.strip().lower() for d in days]
    invalid = [d for d in normalized if d not in WEEKDAYS]
    if invalid:
        raise ValueError(f"Dias inválidos: {', '.join(invalid)}")
    # Keep week order and drop duplicates
    return [d for d in WEEKDAYS if d in normalized]


class ProfessionalCreate(BaseModel):
    name: str
    specialty: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    crm: Optional[str] = None
    work_days: list[str] = []
    notes: Optional[str] = None
    birthday: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Nome é obrigatório")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_br_phone(v)

    @field_validator("work_days")
    @classmethod
    def check_work_days(cls, v):
        return _check_work_days(v)


class ProfessionalUpdate(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    crm: Optional[str] = None
    work_days: Optional[list[str]] = None
    notes: Optional[str] = None
    status: Optional[ProfessionalStatus] = None
    birthday: Optional[date] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_br_phone(v)

    @field_validator("work_days")
    @classmethod
    def check_work_days(cls, v):
        return _check_work_days(v)


class ProfessionalStatusUpdate(BaseModel):
    status: ProfessionalStatus


class ProfessionalResponse(BaseModel):
    id: int
    name: str
    specialty: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    crm: Optional[str] = None
    work_days: Optional[list[str]] = None
    notes: Optional[str] = None
    status: str
    birthday: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
