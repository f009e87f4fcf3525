"""Notification repository - Database operations for notifications"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Notification


class NotificationRepository:
    """Repository for notification database operations"""

    @staticmethod
    def get_notifications(db: Session, user_id: int, limit: int = 50) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_notification_by_id(db: Session, notification_id: int, user_id: int) -> Optional[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    @staticmethod
    def count_unread(db: Session, user_id: int) -> int:
        return (
            db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .scalar()
            or 0
        )

    @staticmethod
    def create_notification(db: Session, user_id: int, **data) -> Notification:
        notification = Notification(user_id=user_id, **data)
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_as_read(db: Session, notification: Notification) -> Notification:
        notification.read = True
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def delete_notification(db: Session, notification: Notification) -> None:
        db.delete(notification)
        db.commit()
