"""Subscription service - Business logic for subscription management"""

import logging
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL
from ...error_messages import action_failure, not_found
from ...models import Subscription, User
from ...plan_limits import (
    PLAN_LIMITS,
    PLAN_ORDER,
    PRODUCTS,
    UNLIMITED,
    get_active_subscription,
    get_current_plan,
    get_next_upgrade_plan,
    get_plan_config,
    get_support_channels,
    get_support_hours,
    get_usage_stats,
    has_ai_access,
    is_valid_plan,
)
from ...realtime import INSERT, UPDATE, publish_change
from ..notifications.service import NotificationService
from .repository import BillingRepository
from .stripe_service import stripe_service

logger = logging.getLogger(__name__)

# Stripe subscription states that keep access open
ACTIVE_STRIPE_STATES = {"active"}


def plan_snapshot(plan: str) -> dict:
    """Limit columns stored on the subscription row at purchase time"""
    config = PLAN_LIMITS[plan]
    return {
        "max_patients": config["patients"],
        "max_professionals": config["professionals"],
        "max_appointments_per_month": config["appointments_per_month"],
        "virabot_enabled": config["virabot"],
    }


class SubscriptionService:
    """Service for subscription management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    # ============================================================================
    # READS
    # ============================================================================

    def get_current_subscription(self, user: User) -> Optional[Subscription]:
        return get_active_subscription(self.db, user.id)

    def get_current_plan(self, user: User) -> dict:
        plan = get_current_plan(self.db, user)
        config = get_plan_config(plan)
        return {
            "plan": plan,
            "price": config["price"],
            "limits": {
                resource: config[resource] if config[resource] is not None else UNLIMITED
                for resource in ("patients", "professionals", "appointments_per_month")
            },
            "support": get_support_channels(plan),
            "support_hours": get_support_hours(plan),
            "virabot_enabled": has_ai_access(plan),
            "next_plan": get_next_upgrade_plan(plan),
        }

    def get_usage(self, user: User) -> dict:
        return get_usage_stats(self.db, user)

    # ============================================================================
    # CHECKOUT
    # ============================================================================

    async def create_checkout_session(self, plan_type: str, user: User) -> dict:
        """Stripe checkout for a monthly subscription to plan_type"""
        if not is_valid_plan(plan_type):
            raise HTTPException(status_code=400, detail=action_failure("billing.invalid_plan"))
        if not stripe_service.is_available():
            raise HTTPException(status_code=503, detail=action_failure("billing.unavailable"))

        try:
            session = await stripe_service.create_checkout_session(
                product=PRODUCTS[plan_type],
                customer_email=user.email,
                success_url=f"{FRONTEND_URL}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{FRONTEND_URL}/pricing",
                metadata={"user_id": str(user.id), "plan_type": plan_type},
            )
        except Exception as e:
            logger.error(f"Failed to create checkout session for user {user.id}: {e}")
            raise HTTPException(status_code=500, detail=action_failure("billing.checkout")) from e

        logger.info(f"✅ Created checkout session for user {user.id}: {session['id']} ({plan_type})")
        return {"session_id": session["id"], "url": session["url"]}

    async def upgrade(self, target_plan: str, user: User) -> dict:
        """Checkout for a strictly higher plan than the current one"""
        if not is_valid_plan(target_plan):
            raise HTTPException(status_code=400, detail=action_failure("billing.invalid_plan"))
        current = get_current_plan(self.db, user)
        if PLAN_ORDER.index(target_plan) <= PLAN_ORDER.index(current):
            raise HTTPException(status_code=400, detail=action_failure("billing.downgrade"))

        logger.info(f"⬆️ User {user.id} upgrading {current} -> {target_plan}")
        return await self.create_checkout_session(target_plan, user)

    async def confirm_checkout(self, session_id: str, user: User) -> Subscription:
        """Reconcile a paid checkout on the success redirect (idempotent with the webhook)"""
        if not stripe_service.is_available():
            raise HTTPException(status_code=503, detail=action_failure("billing.unavailable"))
        try:
            session = await stripe_service.retrieve_checkout_session(session_id)
        except Exception as e:
            logger.error(f"Failed to retrieve checkout session {session_id}: {e}")
            raise not_found("subscription") from e

        if session["metadata"].get("user_id") != str(user.id):
            logger.warning(f"🚫 User {user.id} tried to confirm checkout {session_id} of another user")
            raise not_found("subscription")
        if session.get("payment_status") != "paid":
            raise HTTPException(status_code=400, detail=action_failure("billing.session_unpaid"))

        return self.activate_from_checkout(session)

    def activate_from_checkout(self, session: dict) -> Optional[Subscription]:
        """
        Upsert the user's subscription from a completed checkout session.

        One row per user: the latest row is overwritten with the new plan,
        limits, a one-month period and the price charged.
        """
        metadata = session.get("metadata") or {}
        user_id = metadata.get("user_id")
        plan_type = (metadata.get("plan_type") or "").lower()
        if not user_id or not is_valid_plan(plan_type):
            logger.error(f"❌ Missing metadata in checkout session {session.get('id')}")
            return None

        try:
            user = self.repo.get_user_by_id(self.db, int(user_id))
        except ValueError:
            user = None
        if not user:
            logger.error(f"❌ Checkout session {session.get('id')} references unknown user {user_id}")
            return None

        now = datetime.utcnow()
        values = {
            "plan_type": plan_type,
            "status": "active",
            "stripe_customer_id": session.get("customer"),
            "stripe_subscription_id": session.get("subscription"),
            "stripe_session_id": session.get("id"),
            "price": (session.get("amount_total") or 0) / 100,
            "current_period_start": now,
            "current_period_end": now + relativedelta(months=1),
            "cancel_at_period_end": False,
            **plan_snapshot(plan_type),
        }

        existing = self.repo.get_latest_subscription(self.db, user.id)
        if existing and existing.stripe_session_id == session.get("id") and existing.status == "active":
            logger.info(f"Checkout {session.get('id')} already applied for user {user.id}")
            return existing

        if existing:
            subscription = self.repo.update_subscription(self.db, existing, **values)
            publish_change("subscriptions", user.id, UPDATE, subscription)
        else:
            subscription = self.repo.create_subscription(self.db, user.id, **values)
            publish_change("subscriptions", user.id, INSERT, subscription)
        self.repo.set_stripe_customer(self.db, user, session.get("customer"))

        NotificationService(self.db).notify(
            user.id,
            "Plano Ativado",
            f"Seu plano {PRODUCTS[plan_type]['name']} está ativo.",
            "success",
        )
        logger.info(f"✅ Subscription {subscription.id} active for user {user.id} (plan={plan_type})")
        return subscription

    # ============================================================================
    # SUBSCRIPTION MANAGEMENT
    # ============================================================================

    async def create_subscription(self, plan_type: str, user: User) -> Subscription:
        """Record a subscription row for the user's Stripe customer"""
        if not is_valid_plan(plan_type):
            raise HTTPException(status_code=400, detail=action_failure("billing.invalid_plan"))
        if not stripe_service.is_available():
            raise HTTPException(status_code=503, detail=action_failure("billing.unavailable"))

        try:
            customer_id = await stripe_service.find_or_create_customer(user.email, user.id)
        except Exception as e:
            logger.error(f"Failed to resolve Stripe customer for user {user.id}: {e}")
            raise HTTPException(status_code=500, detail=action_failure("billing.checkout")) from e

        now = datetime.utcnow()
        subscription = self.repo.create_subscription(
            self.db,
            user.id,
            plan_type=plan_type,
            status="active",
            stripe_customer_id=customer_id,
            price=PLAN_LIMITS[plan_type]["price"],
            current_period_start=now,
            current_period_end=now + relativedelta(months=1),
            cancel_at_period_end=False,
            **plan_snapshot(plan_type),
        )
        self.repo.set_stripe_customer(self.db, user, customer_id)
        publish_change("subscriptions", user.id, INSERT, subscription)
        return subscription

    def update_subscription_status(self, subscription_id: int, status: str, user: User) -> Subscription:
        subscription = self.repo.get_subscription_by_id(self.db, subscription_id, user.id)
        if not subscription:
            raise not_found("subscription")
        subscription = self.repo.update_subscription(self.db, subscription, status=status)
        publish_change("subscriptions", user.id, UPDATE, subscription)
        return subscription

    async def cancel(self, user: User) -> Subscription:
        """Cancel the active subscription; Stripe keeps billing until the period ends"""
        subscription = get_active_subscription(self.db, user.id)
        if not subscription:
            raise HTTPException(status_code=400, detail=action_failure("billing.no_subscription"))

        if subscription.stripe_subscription_id and stripe_service.is_available():
            try:
                await stripe_service.cancel_subscription(subscription.stripe_subscription_id)
            except Exception as e:
                logger.error(f"Failed to cancel Stripe subscription for user {user.id}: {e}")
                raise HTTPException(status_code=502, detail=action_failure("billing.unavailable")) from e

        subscription = self.repo.update_subscription(
            self.db, subscription, status="canceled", cancel_at_period_end=True
        )
        logger.info(f"✅ Canceled subscription {subscription.id} for user {user.id}")
        publish_change("subscriptions", user.id, UPDATE, subscription)
        return subscription

    # ============================================================================
    # WEBHOOK EVENTS
    # ============================================================================

    def handle_event(self, event: dict) -> None:
        """Apply one verified Stripe event; unknown types are acknowledged and ignored"""
        event_type = event.get("type")
        obj = (event.get("data") or {}).get("object") or {}
        logger.info(f"📨 Stripe webhook event received: {event_type}")

        if event_type == "checkout.session.completed":
            self.activate_from_checkout(obj)
        elif event_type == "invoice.payment_succeeded":
            self._renew_period(obj.get("customer"))
        elif event_type == "customer.subscription.updated":
            self._sync_stripe_subscription(obj)
        elif event_type == "customer.subscription.deleted":
            self._set_status_for_stripe_subscription(obj.get("id"), status="canceled")
        else:
            logger.info(f"Unhandled Stripe event type: {event_type}")

    def _renew_period(self, customer_id: Optional[str]) -> None:
        subscription = self.repo.get_by_stripe_customer(self.db, customer_id) if customer_id else None
        if not subscription:
            logger.error(f"❌ Subscription not found for customer: {customer_id}")
            return
        now = datetime.utcnow()
        subscription = self.repo.update_subscription(
            self.db,
            subscription,
            status="active",
            current_period_start=now,
            current_period_end=now + relativedelta(months=1),
        )
        publish_change("subscriptions", subscription.user_id, UPDATE, subscription)
        logger.info(f"💳 Payment succeeded for customer {customer_id}, period renewed")

    def _sync_stripe_subscription(self, stripe_subscription: dict) -> None:
        status = "active" if stripe_subscription.get("status") in ACTIVE_STRIPE_STATES else "expired"
        self._set_status_for_stripe_subscription(
            stripe_subscription.get("id"),
            status=status,
            cancel_at_period_end=bool(stripe_subscription.get("cancel_at_period_end")),
        )

    def _set_status_for_stripe_subscription(self, stripe_subscription_id: Optional[str], **updates) -> None:
        rows = self.repo.get_by_stripe_subscription(self.db, stripe_subscription_id) if stripe_subscription_id else []
        if not rows:
            logger.warning(f"⚠️ No local subscription for Stripe subscription {stripe_subscription_id}")
            return
        for subscription in rows:
            subscription = self.repo.update_subscription(self.db, subscription, **updates)
            publish_change("subscriptions", subscription.user_id, UPDATE, subscription)
        logger.info(f"Subscription {stripe_subscription_id} updated: {updates}")

    def expire_subscriptions(self, now: Optional[datetime] = None) -> int:
        """Subscriptions set to cancel (active or canceled) whose period has ended become expired"""
        now = now or datetime.utcnow()
        expired = self.repo.get_expired_cancellations(self.db, now)
        for subscription in expired:
            subscription.status = "expired"
        if expired:
            self.db.commit()
            for subscription in expired:
                publish_change("subscriptions", subscription.user_id, UPDATE, subscription)
            logger.info(f"⏰ Expired {len(expired)} subscriptions")
        return len(expired)
