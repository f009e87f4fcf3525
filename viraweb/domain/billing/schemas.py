"""Billing domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, field_validator

from ...plan_limits import PLAN_ORDER

SubscriptionStatus = Literal["active", "canceled", "expired"]


def _check_plan(v: str) -> str:
    plan = (v or "").strip().lower()
    if plan not in PLAN_ORDER:
        raise ValueError("Plano inválido")
    return plan


class CheckoutRequest(BaseModel):
    """Schema for creating a checkout session"""

    plan_type: str

    @field_validator("plan_type")
    @classmethod
    def validate_plan(cls, v: str) -> str:
        return _check_plan(v)


class UpgradeRequest(BaseModel):
    target_plan: str

    @field_validator("target_plan")
    @classmethod
    def validate_plan(cls, v: str) -> str:
        return _check_plan(v)


class ConfirmCheckoutRequest(BaseModel):
    session_id: str

    @field_validator("session_id")
    @classmethod
    def validate_session_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("session_id é obrigatório")
        return v.strip()


class SubscriptionStatusUpdate(BaseModel):
    status: SubscriptionStatus


class CheckoutResponse(BaseModel):
    session_id: str
    url: Optional[str] = None


class SubscriptionResponse(BaseModel):
    id: int
    plan_type: str
    status: str
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    price: Optional[float] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool
    max_patients: Optional[int] = None
    max_professionals: Optional[int] = None
    max_appointments_per_month: Optional[int] = None
    virabot_enabled: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResourceUsage(BaseModel):
    current: int
    limit: Union[int, str]
    percentage: int
    remaining: Union[int, str]
    warning_level: str


class LimitBanner(BaseModel):
    resource: str
    label: str
    current: int
    limit: Optional[int] = None
    percentage: int
    at_limit: bool


class UsageResponse(BaseModel):
    plan: str
    usage: dict[str, ResourceUsage]
    reset_date: date
    banners: list[LimitBanner]
    next_plan: Optional[str] = None
    recommendation: Optional[str] = None


class PlanResponse(BaseModel):
    plan: str
    price: float
    limits: dict[str, Union[int, str]]
    support: list[str]
    support_hours: str
    virabot_enabled: bool
    next_plan: Optional[str] = None
