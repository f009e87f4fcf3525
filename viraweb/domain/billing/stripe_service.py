"""Stripe service - Integration with the Stripe API"""

import logging
from typing import Optional

import stripe
from starlette.concurrency import run_in_threadpool

from ...config import STRIPE_CURRENCY, STRIPE_SECRET_KEY

logger = logging.getLogger(__name__)


class StripeNotConfiguredError(Exception):
    """Raised when a Stripe call is made without STRIPE_SECRET_KEY"""


class StripeService:
    """Service for Stripe API operations (the SDK is blocking, calls run in the threadpool)"""

    def __init__(self, api_key: Optional[str] = STRIPE_SECRET_KEY, currency: str = STRIPE_CURRENCY):
        self.api_key = api_key
        self.currency = currency
        if not self.api_key:
            logger.warning("STRIPE_SECRET_KEY not set; billing endpoints will fail until configured")
        else:
            stripe.api_key = self.api_key
            logger.info("Stripe client initialized")

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _require_client(self) -> None:
        if not self.api_key:
            raise StripeNotConfiguredError("Stripe client not initialized")

    async def create_checkout_session(
        self,
        product: dict,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[dict] = None,
    ) -> dict:
        """Monthly subscription checkout for one plan product"""
        self._require_client()
        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                mode="subscription",
                payment_method_types=["card"],
                customer_email=customer_email,
                line_items=[
                    {
                        "price_data": {
                            "currency": self.currency,
                            "product_data": {
                                "name": product["name"],
                                "description": product["description"],
                            },
                            "unit_amount": product["price_in_cents"],
                            "recurring": {"interval": "month"},
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            logger.error(f"Failed to create checkout session: {e}")
            raise
        return {"id": session.id, "url": session.url}

    async def retrieve_checkout_session(self, session_id: str) -> dict:
        self._require_client()
        try:
            session = await run_in_threadpool(stripe.checkout.Session.retrieve, session_id)
        except stripe.StripeError as e:
            logger.error(f"Failed to retrieve checkout session {session_id}: {e}")
            raise
        metadata = session.metadata
        return {
            "id": session.id,
            "payment_status": session.payment_status,
            "status": session.status,
            "customer": session.customer,
            "subscription": session.subscription,
            "amount_total": session.amount_total,
            "metadata": {key: metadata[key] for key in metadata.keys()} if metadata else {},
        }

    async def find_or_create_customer(self, email: str, user_id: int) -> str:
        """Return the id of the Stripe customer with this email, creating one if needed"""
        self._require_client()
        try:
            customers = await run_in_threadpool(stripe.Customer.list, email=email, limit=1)
            if customers.data:
                return customers.data[0].id
            customer = await run_in_threadpool(
                stripe.Customer.create, email=email, metadata={"user_id": str(user_id)}
            )
        except stripe.StripeError as e:
            logger.error(f"Failed to find or create customer for {email}: {e}")
            raise
        logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
        return customer.id

    async def cancel_subscription(self, subscription_id: str, cancel_at_period_end: bool = True) -> None:
        self._require_client()
        try:
            if cancel_at_period_end:
                await run_in_threadpool(
                    stripe.Subscription.modify, subscription_id, cancel_at_period_end=True
                )
            else:
                await run_in_threadpool(stripe.Subscription.cancel, subscription_id)
        except stripe.StripeError as e:
            logger.error(f"Failed to cancel subscription {subscription_id}: {e}")
            raise


# Singleton instance
stripe_service = StripeService()
