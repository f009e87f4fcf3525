"""Notification service - Business logic for in-app notifications"""

import logging

from sqlalchemy.orm import Session

from ...error_messages import not_found
from ...models import Notification, User
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Service layer for notifications; other domains call notify() for side effects"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def get_notifications(self, user: User, limit: int = 50) -> list[Notification]:
        return self.repo.get_notifications(self.db, user.id, limit)

    def get_unread_count(self, user: User) -> int:
        return self.repo.count_unread(self.db, user.id)

    def notify(self, user_id: int, title: str, message: str, type: str = "info") -> Notification:
        """Create a notification for a tenant"""
        notification = self.repo.create_notification(
            self.db, user_id, title=title, message=message, type=type, read=False
        )
        logger.debug(f"🔔 Notification '{title}' created for user {user_id}")
        publish_change("notifications", user_id, INSERT, notification)
        return notification

    def mark_as_read(self, notification_id: int, user: User) -> Notification:
        notification = self.repo.get_notification_by_id(self.db, notification_id, user.id)
        if not notification:
            raise not_found("notification")
        notification = self.repo.mark_as_read(self.db, notification)
        publish_change("notifications", user.id, UPDATE, notification)
        return notification

    def mark_all_as_read(self, user: User) -> int:
        return self.repo.mark_all_as_read(self.db, user.id)

    def delete_notification(self, notification_id: int, user: User) -> dict:
        notification = self.repo.get_notification_by_id(self.db, notification_id, user.id)
        if not notification:
            raise not_found("notification")
        snapshot = {"id": notification.id}
        self.repo.delete_notification(self.db, notification)
        publish_change("notifications", user.id, DELETE, snapshot)
        return {"message": "Notificação removida"}
