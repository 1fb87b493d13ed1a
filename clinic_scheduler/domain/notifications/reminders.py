"""
Appointment reminders.

Runs periodically (celery beat, or the manual trigger endpoint) and
reminds both participants of every scheduled appointment that starts
between REMINDER_WINDOW_START_HOURS and REMINDER_WINDOW_END_HOURS from
now. An appointment is reminded at most once.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from clinic_scheduler.core.config import settings
from clinic_scheduler.domain.appointments.repository import AppointmentRepository
from clinic_scheduler.domain.notifications.models import NotificationType
from clinic_scheduler.domain.notifications.repository import NotificationRepository
from clinic_scheduler.domain.notifications.service import NotificationService

logger = logging.getLogger(__name__)


class ReminderService:
    """Issues reminder notifications for upcoming appointments"""

    def __init__(self, db, notification_service: Optional[NotificationService] = None):
        self.db = db
        self.appointment_repo = AppointmentRepository(db)
        self.notification_repo = NotificationRepository(db)
        self.notifications = notification_service or NotificationService(db)

    def reminder_window(self, now: Optional[datetime] = None):
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        return (
            now + timedelta(hours=settings.REMINDER_WINDOW_START_HOURS),
            now + timedelta(hours=settings.REMINDER_WINDOW_END_HOURS),
        )

    def check_upcoming_appointments(self, now: Optional[datetime] = None) -> int:
        """Send reminders and return how many appointments were reminded"""
        window_start, window_end = self.reminder_window(now)
        appointments = self.appointment_repo.get_upcoming(window_start, window_end)

        reminded = 0
        for appointment in appointments:
            if self.notification_repo.exists_for_appointment(
                appointment.id, NotificationType.APPOINTMENT_REMINDER
            ):
                continue
            self.notifications.notify_appointment(appointment, NotificationType.APPOINTMENT_REMINDER)
            reminded += 1

        self.db.commit()
        logger.info(f"Reminder check: {reminded} of {len(appointments)} upcoming appointments reminded")
        return reminded
