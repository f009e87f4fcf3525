"""Billing repository - Database operations for subscriptions"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Subscription, User


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_latest_subscription(db: Session, user_id: int) -> Optional[Subscription]:
        """Most recent subscription row of a user, whatever its status"""
        return (
            db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .first()
        )

    @staticmethod
    def get_subscription_by_id(db: Session, subscription_id: int, user_id: int) -> Optional[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.id == subscription_id, Subscription.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_by_stripe_customer(db: Session, customer_id: str) -> Optional[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.stripe_customer_id == customer_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .first()
        )

    @staticmethod
    def get_by_stripe_subscription(db: Session, stripe_subscription_id: str) -> list[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.stripe_subscription_id == stripe_subscription_id)
            .all()
        )

    @staticmethod
    def get_expired_cancellations(db: Session, now: datetime) -> list[Subscription]:
        return (
            db.query(Subscription)
            .filter(
                Subscription.status.in_(("active", "canceled")),
                Subscription.cancel_at_period_end.is_(True),
                Subscription.current_period_end < now,
            )
            .all()
        )

    @staticmethod
    def create_subscription(db: Session, user_id: int, **data) -> Subscription:
        subscription = Subscription(user_id=user_id, **data)
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    @staticmethod
    def update_subscription(db: Session, subscription: Subscription, **updates) -> Subscription:
        for key, value in updates.items():
            if hasattr(subscription, key):
                setattr(subscription, key, value)
        db.commit()
        db.refresh(subscription)
        return subscription

    @staticmethod
    def set_stripe_customer(db: Session, user: User, customer_id: Optional[str]) -> None:
        if customer_id and user.stripe_customer_id != customer_id:
            user.stripe_customer_id = customer_id
            db.commit()
