"""
Notifications Service Layer

In-app notifications with optional email delivery. Email is best-effort:
a failed delivery is logged and never undoes the notification.
"""

from typing import Optional, List, Dict, Any, Callable
import logging
import uuid

from clinic_scheduler.core.exceptions import NotFoundError
from clinic_scheduler.domain.notifications.models import Notification, NotificationType
from clinic_scheduler.domain.notifications.repository import NotificationRepository
from clinic_scheduler.domain.users.repository import UserRepository
from clinic_scheduler.services.email import send_appointment_email

logger = logging.getLogger(__name__)

NOTIFICATION_HISTORY_LIMIT = 100

APPOINTMENT_TITLES = {
    NotificationType.APPOINTMENT_CREATED: "New appointment",
    NotificationType.APPOINTMENT_UPDATED: "Appointment changed",
    NotificationType.APPOINTMENT_CANCELLED: "Appointment cancelled",
    NotificationType.APPOINTMENT_REMINDER: "Appointment reminder",
}

APPOINTMENT_VERBS = {
    NotificationType.APPOINTMENT_CREATED: "is booked",
    NotificationType.APPOINTMENT_UPDATED: "was changed",
    NotificationType.APPOINTMENT_CANCELLED: "was cancelled",
    NotificationType.APPOINTMENT_REMINDER: "is coming up",
}


def format_date(value) -> str:
    return value.strftime("%Y-%m-%d")


def format_time(value) -> str:
    return value.strftime("%H:%M")


class NotificationService:
    """Service layer for notifications"""

    def __init__(self, db, email_sender: Callable[..., Any] = send_appointment_email):
        self.db = db
        self.notification_repo = NotificationRepository(db)
        self.user_repo = UserRepository(db)
        self.email_sender = email_sender

    def create(
        self,
        user_id: uuid.UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        appointment_id: Optional[uuid.UUID] = None,
        email_context: Optional[Dict[str, Any]] = None
    ) -> Notification:
        """Record a notification; the caller commits"""
        notification = self.notification_repo.create({
            "user_id": user_id,
            "type": notification_type,
            "title": title,
            "message": message,
            "appointment_id": appointment_id,
            "read": False
        })

        if email_context is not None:
            self._send_email(user_id, notification_type, email_context)

        return notification

    def publish(
        self,
        user_id: uuid.UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        appointment_id: Optional[uuid.UUID] = None
    ) -> Notification:
        """Create a notification and commit it"""
        if not self.user_repo.get_by_id(user_id):
            raise NotFoundError(f"User with ID {user_id} not found")
        notification = self.create(user_id, notification_type, title, message, appointment_id)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def _send_email(
        self,
        user_id: uuid.UUID,
        notification_type: NotificationType,
        email_context: Dict[str, Any]
    ) -> None:
        try:
            user = self.user_repo.get_by_id(user_id)
            if user is None or not user.email:
                return
            kind = notification_type.value.replace("appointment_", "")
            self.email_sender(user.email, user.full_name, kind, email_context)
        except Exception:
            logger.exception(f"Failed to send {notification_type.value} email to user {user_id}")

    def notify_appointment(self, appointment, notification_type: NotificationType) -> List[Notification]:
        """Notify the patient and the doctor of an appointment.

        Reads names from the appointment's patient and doctor, so it must
        run while the appointment is still loaded.
        """
        patient = appointment.patient
        doctor = appointment.doctor
        patient_name = patient.full_name if patient else "Patient"
        doctor_name = doctor.full_name if doctor else "Doctor"
        date = format_date(appointment.start_time)
        time = format_time(appointment.start_time)
        title = APPOINTMENT_TITLES[notification_type]
        verb = APPOINTMENT_VERBS[notification_type]

        notifications = [
            self.create(
                appointment.patient_id,
                notification_type,
                title,
                f"Your appointment with {doctor_name} on {date} at {time} {verb}.",
                appointment_id=appointment.id,
                email_context={"date": date, "time": time, "doctor_name": doctor_name}
            ),
            self.create(
                appointment.doctor_id,
                notification_type,
                title,
                f"Your appointment with patient {patient_name} on {date} at {time} {verb}.",
                appointment_id=appointment.id,
                email_context={"date": date, "time": time, "patient_name": patient_name}
            ),
        ]
        return notifications

    def list_for_user(self, user_id: uuid.UUID) -> List[Notification]:
        return self.notification_repo.get_for_user(user_id, limit=NOTIFICATION_HISTORY_LIMIT)

    def list_unread(self, user_id: uuid.UUID) -> List[Notification]:
        return self.notification_repo.get_for_user(user_id, unread_only=True)

    def unread_count(self, user_id: uuid.UUID) -> int:
        return self.notification_repo.count_unread(user_id)

    def mark_read(self, user_id: uuid.UUID, notification_ids: List[uuid.UUID]) -> int:
        updated = self.notification_repo.mark_read(user_id, notification_ids)
        self.db.commit()
        return updated

    def mark_all_read(self, user_id: uuid.UUID) -> int:
        updated = self.notification_repo.mark_all_read(user_id)
        self.db.commit()
        return updated

    def delete(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> None:
        notification = self.notification_repo.get_by_id(notification_id)
        # Foreign notifications are reported as missing
        if not notification or notification.user_id != user_id:
            raise NotFoundError("Notification not found")
        self.notification_repo.delete(notification)
        self.db.commit()
