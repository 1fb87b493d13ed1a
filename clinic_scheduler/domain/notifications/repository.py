from typing import Optional, List
from sqlalchemy import func
import uuid

from clinic_scheduler.domain.notifications.models import Notification, NotificationType


class NotificationRepository:
    """Repository for notification data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, notification_data: dict) -> Notification:
        """Create a new notification"""
        notification = Notification(**notification_data)
        self.db.add(notification)
        self.db.flush()
        return notification

    def get_by_id(self, notification_id: uuid.UUID) -> Optional[Notification]:
        return self.db.query(Notification).filter(Notification.id == notification_id).first()

    def get_for_user(
        self,
        user_id: uuid.UUID,
        unread_only: bool = False,
        limit: Optional[int] = None
    ) -> List[Notification]:
        """Get a user's notifications, newest first"""
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.read == False)  # noqa: E712
        query = query.order_by(Notification.created_at.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def count_unread(self, user_id: uuid.UUID) -> int:
        return self.db.query(func.count(Notification.id)).filter(
            Notification.user_id == user_id,
            Notification.read == False  # noqa: E712
        ).scalar()

    def mark_read(self, user_id: uuid.UUID, notification_ids: List[uuid.UUID]) -> int:
        """Mark the given notifications read, only if they belong to the user"""
        if not notification_ids:
            return 0
        result = self.db.query(Notification).filter(
            Notification.id.in_(notification_ids),
            Notification.user_id == user_id
        ).update({"read": True}, synchronize_session="fetch")
        self.db.flush()
        return result

    def mark_all_read(self, user_id: uuid.UUID) -> int:
        result = self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False  # noqa: E712
        ).update({"read": True}, synchronize_session="fetch")
        self.db.flush()
        return result

    def exists_for_appointment(self, appointment_id: uuid.UUID, notification_type: NotificationType) -> bool:
        """Whether a notification of this type was already issued for the appointment"""
        return self.db.query(Notification.id).filter(
            Notification.appointment_id == appointment_id,
            Notification.type == notification_type
        ).first() is not None

    def delete(self, notification: Notification) -> None:
        self.db.delete(notification)
        self.db.flush()
