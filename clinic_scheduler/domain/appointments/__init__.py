# Appointments domain module
from clinic_scheduler.domain.appointments.models import (
    Appointment,
    AppointmentStatus,
    RecurrenceRule,
)

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "RecurrenceRule",
]
