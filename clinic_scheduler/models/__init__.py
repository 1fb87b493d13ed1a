# Import every domain model so Base.metadata knows all tables
from clinic_scheduler.domain.users.models import User, UserRole
from clinic_scheduler.domain.workplaces.models import Workplace, DoctorWorkplace
from clinic_scheduler.domain.appointments.models import Appointment, AppointmentStatus, RecurrenceRule
from clinic_scheduler.domain.suggestions.models import AppointmentSuggestion, SuggestionStatus
from clinic_scheduler.domain.notifications.models import Notification, NotificationType
from clinic_scheduler.domain.medical_records.models import MedicalRecord

__all__ = [
    "User",
    "UserRole",
    "Workplace",
    "DoctorWorkplace",
    "Appointment",
    "AppointmentStatus",
    "RecurrenceRule",
    "AppointmentSuggestion",
    "SuggestionStatus",
    "Notification",
    "NotificationType",
    "MedicalRecord",
]
