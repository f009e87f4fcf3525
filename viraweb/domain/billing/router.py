"""Billing router - FastAPI endpoints for subscriptions, checkout and Stripe webhooks"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import STRIPE_WEBHOOK_SECRET
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from ...security_middleware import bypass_rls
from ...webhook_security import verify_stripe_webhook
from .schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ConfirmCheckoutRequest,
    PlanResponse,
    SubscriptionResponse,
    SubscriptionStatusUpdate,
    UpgradeRequest,
    UsageResponse,
)
from .subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["Billing"])
checkout_router = APIRouter(prefix="/api", tags=["Billing"])
webhooks_router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])

rate_limit_webhooks = create_rate_limiter(limit=100, window_seconds=60, key_prefix="stripe_webhook")


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


# ============================================================================
# SUBSCRIPTION MANAGEMENT
# ============================================================================


@router.get("", response_model=Optional[SubscriptionResponse])
async def get_current_subscription(
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Latest active subscription, or null"""
    return service.get_current_subscription(user)


@router.post("", response_model=SubscriptionResponse, status_code=201)
async def create_subscription(
    body: CheckoutRequest,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.create_subscription(body.plan_type, user)


@router.get("/plan", response_model=PlanResponse)
async def get_current_plan(
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.get_current_plan(user)


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Plan usage per resource with the limit banners to display"""
    return service.get_usage(user)


@router.post("/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.cancel(user)


@router.put("/{subscription_id}/status", response_model=SubscriptionResponse)
async def update_subscription_status(
    subscription_id: int,
    body: SubscriptionStatusUpdate,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.update_subscription_status(subscription_id, body.status, user)


# ============================================================================
# CHECKOUT
# ============================================================================


@checkout_router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    body: CheckoutRequest,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.create_checkout_session(body.plan_type, user)


@checkout_router.post("/checkout/confirm", response_model=SubscriptionResponse)
async def confirm_checkout(
    body: ConfirmCheckoutRequest,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Called from the success page so the plan is active before the webhook lands"""
    return await service.confirm_checkout(body.session_id, user)


@checkout_router.post("/subscription/upgrade", response_model=CheckoutResponse)
async def upgrade_subscription(
    body: UpgradeRequest,
    user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.upgrade(body.target_plan, user)


# ============================================================================
# WEBHOOKS
# ============================================================================


@webhooks_router.post("/stripe")
async def handle_stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_webhooks),
):
    """
    Stripe webhook endpoint.

    The signature is checked against the raw body before anything is parsed;
    a bad or missing signature is a 400 so Stripe retries.
    """
    _, raw_body = await verify_stripe_webhook(request, STRIPE_WEBHOOK_SECRET)

    try:
        event = json.loads(raw_body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid payload") from e

    bypass_rls(db)
    try:
        SubscriptionService(db).handle_event(event)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Webhook handler error for {event.get('type')}: {e}")
        raise HTTPException(status_code=500, detail="Webhook handler failed") from e

    return {"received": True}
