"""
Plan limits and utilities for subscription-based restrictions.
"""

from datetime import date
from typing import Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from .models import Appointment, Patient, Professional, Subscription, User

DEFAULT_PLAN = "basic"
PLAN_ORDER = ["basic", "premium", "master"]
UNLIMITED = "unlimited"

# None means unlimited
PLAN_LIMITS = {
    "basic": {
        "patients": 75,
        "professionals": 7,
        "appointments_per_month": 50,
        "price": 74.90,
        "support": ["Email"],
        "support_hours": "Horário comercial",
        "virabot": False,
    },
    "premium": {
        "patients": 500,
        "professionals": 50,
        "appointments_per_month": 500,
        "price": 149.90,
        "support": ["Email", "WhatsApp"],
        "support_hours": "8:00 às 18:00 (5 dias por semana)",
        "virabot": True,
    },
    "master": {
        "patients": None,
        "professionals": None,
        "appointments_per_month": None,
        "price": 249.90,
        "support": ["Email", "WhatsApp", "24/7"],
        "support_hours": "24 horas, 7 dias por semana",
        "virabot": True,
    },
}

# Checkout line items (amounts in cents)
PRODUCTS = {
    "basic": {
        "id": "basic-plan",
        "name": "Plano Básico",
        "description": "Ideal para profissionais autônomos e pequenos consultórios",
        "price_in_cents": 7490,
        "features": [
            "Até 75 clientes",
            "Até 7 profissionais",
            "50 agendamentos por mês",
            "Suporte por email em horário comercial",
        ],
    },
    "premium": {
        "id": "premium-plan",
        "name": "Plano Premium",
        "description": "Para clínicas em crescimento",
        "price_in_cents": 14990,
        "features": [
            "Até 500 clientes",
            "Até 50 profissionais",
            "500 agendamentos por mês",
            "Suporte por email e WhatsApp",
            "Assistente ViraBot",
        ],
    },
    "master": {
        "id": "master-plan",
        "name": "Plano Master",
        "description": "Para clínicas e empresas sem limites",
        "price_in_cents": 24990,
        "features": [
            "Clientes ilimitados",
            "Profissionais ilimitados",
            "Agendamentos ilimitados",
            "Suporte 24/7",
            "Assistente ViraBot",
        ],
    },
}

RESOURCE_LABELS = {
    "patients": "clientes",
    "professionals": "profissionais",
    "appointments_per_month": "agendamentos mensais",
}

BANNER_LABELS = {
    "patients": "pacientes",
    "professionals": "profissionais",
    "appointments_per_month": "agendamentos este mês",
}

BANNER_THRESHOLD = 80


def is_valid_plan(plan: Optional[str]) -> bool:
    return bool(plan) and plan.lower() in PLAN_LIMITS


def get_plan_config(plan: Optional[str]) -> dict:
    """Plan configuration; unknown plans fall back to basic"""
    return PLAN_LIMITS.get((plan or DEFAULT_PLAN).lower(), PLAN_LIMITS[DEFAULT_PLAN])


def get_plan_limit(plan: Optional[str], resource: str) -> Optional[int]:
    """Get the limit of a resource for a plan. Returns None for unlimited, 0 for no plan."""
    if not plan:
        return 0
    return get_plan_config(plan)[resource]


def has_ai_access(plan: Optional[str]) -> bool:
    return bool(plan) and get_plan_config(plan)["virabot"]


def get_support_channels(plan: Optional[str]) -> list[str]:
    return list(get_plan_config(plan)["support"])


def get_support_hours(plan: Optional[str]) -> str:
    return get_plan_config(plan)["support_hours"]


def get_active_subscription(db: Session, user_id: int) -> Optional[Subscription]:
    """Latest active subscription of a user"""
    return (
        db.query(Subscription)
        .filter(Subscription.user_id == user_id, Subscription.status == "active")
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .first()
    )


def get_current_plan(db: Session, user: User) -> str:
    """Plan of the active subscription; users without one are on basic"""
    subscription = get_active_subscription(db, user.id)
    if subscription and is_valid_plan(subscription.plan_type):
        return subscription.plan_type.lower()
    return DEFAULT_PLAN


# ============================================================================
# USAGE ARITHMETIC
# ============================================================================


def calculate_percentage(current: int, limit: Optional[int]) -> int:
    if limit is None:
        return 0
    if limit == 0:
        return 100
    return min(round(current / limit * 100), 100)


def get_remaining(current: int, limit: Optional[int]) -> Union[int, str]:
    if limit is None:
        return UNLIMITED
    return max(limit - current, 0)


def get_warning_level(percentage: int) -> str:
    if percentage < 70:
        return "safe"
    if percentage < 85:
        return "warning"
    if percentage < 100:
        return "danger"
    return "critical"


def is_at_limit(current: int, limit: Optional[int]) -> bool:
    return limit is not None and current >= limit


def should_show_limit_banner(current: int, limit: Optional[int]) -> bool:
    """Banner appears from 80% of a numeric limit; never for unlimited plans"""
    if limit is None:
        return False
    # Raw ratio; the rounded percentage is for display only
    return current * 100 >= BANNER_THRESHOLD * limit


def get_next_upgrade_plan(plan: Optional[str]) -> Optional[str]:
    current = (plan or DEFAULT_PLAN).lower()
    if current not in PLAN_ORDER:
        return PLAN_ORDER[1]
    index = PLAN_ORDER.index(current)
    return PLAN_ORDER[index + 1] if index + 1 < len(PLAN_ORDER) else None


def get_upgrade_recommendation(plan: Optional[str], usage: dict) -> Optional[str]:
    """Suggest the next plan when any resource is at 85% or more"""
    next_plan = get_next_upgrade_plan(plan)
    if not next_plan:
        return None
    pressured = [
        BANNER_LABELS[resource]
        for resource, stats in usage.items()
        if resource in BANNER_LABELS and stats["percentage"] >= 85
    ]
    if not pressured:
        return None
    return (
        f"Você está próximo do limite de {', '.join(pressured)}. "
        f"Considere fazer upgrade para o {PRODUCTS[next_plan]['name']}."
    )


# ============================================================================
# COUNTS AND CHECKS
# ============================================================================


def month_bounds(today: Optional[date] = None) -> tuple[date, date]:
    """First day of this month and first day of the next one"""
    today = today or date.today()
    start = today.replace(day=1)
    if start.month == 12:
        next_start = start.replace(year=start.year + 1, month=1)
    else:
        next_start = start.replace(month=start.month + 1)
    return start, next_start


def count_resource(db: Session, user_id: int, resource: str, today: Optional[date] = None) -> int:
    if resource == "patients":
        query = db.query(func.count(Patient.id)).filter(Patient.user_id == user_id)
    elif resource == "professionals":
        query = db.query(func.count(Professional.id)).filter(Professional.user_id == user_id)
    elif resource == "appointments_per_month":
        start, _ = month_bounds(today)
        query = db.query(func.count(Appointment.id)).filter(
            Appointment.user_id == user_id, Appointment.appointment_date >= start
        )
    else:
        raise ValueError(f"Unknown plan resource: {resource}")
    return query.scalar() or 0


def _can_add(db: Session, user: User, resource: str) -> tuple[bool, str]:
    plan = get_current_plan(db, user)
    limit = get_plan_limit(plan, resource)
    if limit is None:
        return True, ""

    current = count_resource(db, user.id, resource)
    if current < limit:
        return True, ""

    return (
        False,
        f"Você atingiu o limite de {limit} {RESOURCE_LABELS[resource]} do seu plano. "
        "Faça upgrade para adicionar mais.",
    )


def can_add_patient(db: Session, user: User) -> tuple[bool, str]:
    """
    Check if user can add another patient.
    Returns (can_add, error_message).
    """
    return _can_add(db, user, "patients")


def can_add_professional(db: Session, user: User) -> tuple[bool, str]:
    return _can_add(db, user, "professionals")


def can_add_appointment(db: Session, user: User) -> tuple[bool, str]:
    """Monthly appointment quota, counted from the first day of the current month"""
    return _can_add(db, user, "appointments_per_month")


def get_usage_stats(db: Session, user: User, today: Optional[date] = None) -> dict:
    """Usage of every limited resource for the current plan"""
    plan = get_current_plan(db, user)
    _, reset_date = month_bounds(today)

    usage = {}
    for resource in RESOURCE_LABELS:
        current = count_resource(db, user.id, resource, today)
        limit = get_plan_limit(plan, resource)
        percentage = calculate_percentage(current, limit)
        usage[resource] = {
            "current": current,
            "limit": limit if limit is not None else UNLIMITED,
            "percentage": percentage,
            "remaining": get_remaining(current, limit),
            "warning_level": get_warning_level(percentage),
        }

    return {
        "plan": plan,
        "usage": usage,
        "reset_date": reset_date,
        "banners": get_limit_banners(usage),
        "next_plan": get_next_upgrade_plan(plan),
        "recommendation": get_upgrade_recommendation(plan, usage),
    }


def get_limit_banners(usage: dict) -> list[dict]:
    """Banner payloads for resources at or above the warning threshold"""
    banners = []
    for resource, stats in usage.items():
        limit = None if stats["limit"] == UNLIMITED else stats["limit"]
        if not should_show_limit_banner(stats["current"], limit):
            continue
        banners.append(
            {
                "resource": resource,
                "label": BANNER_LABELS[resource],
                "current": stats["current"],
                "limit": limit,
                "percentage": stats["percentage"],
                "at_limit": is_at_limit(stats["current"], limit),
            }
        )
    return banners
