"""Billing domain - Stripe subscriptions, checkout and webhooks"""

from .router import checkout_router, router, webhooks_router

__all__ = ["router", "checkout_router", "webhooks_router"]
