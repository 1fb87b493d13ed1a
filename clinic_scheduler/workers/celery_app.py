from celery import Celery
from celery.schedules import crontab
from clinic_scheduler.core.config import settings

# Create Celery app
celery_app = Celery(
    "clinic_scheduler",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["clinic_scheduler.workers.tasks"]
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    worker_max_tasks_per_child=1000,

    # Beat schedule (periodic tasks)
    beat_schedule={
        "appointment-reminders": {
            "task": "clinic_scheduler.workers.tasks.check_appointment_reminders",
            "schedule": crontab(minute=0, hour=f"*/{settings.REMINDER_INTERVAL_HOURS}"),
        },
    },

    # Result backend settings
    result_expires=3600,  # 1 hour

    broker_connection_retry_on_startup=True,
)


if __name__ == "__main__":
    celery_app.start()
