"""Settings schemas"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_br_phone, validate_email


class SettingsResponse(BaseModel):
    email: str
    full_name: Optional[str] = None
    clinic_name: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_br_phone(v)


class ClinicUpdate(BaseModel):
    clinic_name: str

    @field_validator("clinic_name")
    @classmethod
    def validate_clinic_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Nome da clínica é obrigatório")
        return v.strip()


class EmailUpdate(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        email = validate_email(v)
        if not email:
            raise ValueError("Email é obrigatório")
        return email


class PasswordUpdate(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v or "") < 6:
            raise ValueError("A senha deve ter pelo menos 6 caracteres")
        return v
