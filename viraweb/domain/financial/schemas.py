"""Financial domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

PaymentMethod = Literal["cash", "credit", "debit", "pix", "transfer"]
PaymentStatus = Literal["pending", "paid", "overdue"]
SummaryPeriod = Literal["daily", "weekly", "monthly"]
MetricsPeriod = Literal["week", "month", "quarter", "year"]


class PaymentCreate(BaseModel):
    patient_id: int
    appointment_id: Optional[int] = None
    attendance_id: Optional[int] = None
    amount: float
    discount: float = 0
    method: Optional[PaymentMethod] = None
    status: Literal["pending", "paid"] = "pending"
    due_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("O valor deve ser maior que zero")
        return round(v, 2)

    @model_validator(mode="after")
    def validate_discount(self):
        if self.discount < 0 or self.discount > self.amount:
            raise ValueError("Desconto deve estar entre zero e o valor do pagamento")
        return self


class PaymentUpdate(BaseModel):
    amount: Optional[float] = None
    discount: Optional[float] = None
    method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("amount", "discount")
    @classmethod
    def reject_null(cls, v, info):
        # Only runs for fields present in the payload; omit a field to keep it
        if v is None:
            raise ValueError(f"{info.field_name} não pode ser nulo")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("O valor deve ser maior que zero")
        return v


class PaymentResponse(BaseModel):
    id: int
    patient_id: int
    patient_name: Optional[str] = None
    appointment_id: Optional[int] = None
    attendance_id: Optional[int] = None
    amount: float
    discount: float
    currency: str
    method: Optional[str] = None
    status: str
    payment_date: Optional[datetime] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FinancialSummaryResponse(BaseModel):
    period: str
    start_date: date
    total_received: float
    total_discounts: float
    total_pending: float
    payment_count: int


class SeriesPoint(BaseModel):
    date: date
    value: float


class FinancialSessionUpdate(BaseModel):
    unit_price: Optional[float] = None
    discount: Optional[float] = None
    paid: Optional[bool] = None
    payment_id: Optional[int] = None


class FinancialSessionResponse(BaseModel):
    id: int
    patient_id: int
    appointment_id: Optional[int] = None
    session_date: date
    unit_price: float
    discount: float
    paid: bool
    payment_id: Optional[int] = None

    class Config:
        from_attributes = True


class PatientFinancialSummary(BaseModel):
    patient_id: int
    total_sessions: int
    paid_sessions: int
    unpaid_sessions: int
    paid: float
    due: float
    discounts: float


class OutstandingPatient(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    unpaid_sessions: int
    outstanding: float


class MetricsPoint(BaseModel):
    date: date
    income: float
    expenses: float
    default_rate: float
