from loguru import logger

import clinic_scheduler.models  # noqa: F401
from clinic_scheduler.workers.celery_app import celery_app
from clinic_scheduler.infrastructure.database import SessionLocal
from clinic_scheduler.domain.notifications.reminders import ReminderService


@celery_app.task(name="clinic_scheduler.workers.tasks.check_appointment_reminders", bind=True, max_retries=3)
def check_appointment_reminders(self):
    """
    Celery task to remind patients and doctors of tomorrow's appointments.
    """
    logger.info("Background task: checking upcoming appointments for reminders")
    db = SessionLocal()
    try:
        reminded = ReminderService(db).check_upcoming_appointments()
    except Exception as exc:
        db.rollback()
        logger.error(f"Reminder check failed: {exc}")
        raise self.retry(exc=exc, countdown=2 ** self.request.retries * 60)
    finally:
        db.close()

    logger.info(f"Reminder check complete: {reminded} appointments reminded")
    return {"status": "success", "reminded": reminded}
