"""
Appointments Service Layer

Business logic for booking, changing and removing appointments.

A booking is a read-then-write sequence: the owners' user rows are locked,
the doctor's and patient's calendars are checked for overlaps, and only
then is the appointment (plus any recurring occurrences) written, all in
one transaction. Notifications are sent after the commit and are
best-effort.
"""

from typing import Optional, List, Union
from datetime import datetime, date, timezone
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import (
    BadRequestError, ConflictError, NotFoundError, AuthorizationError
)
from clinic_scheduler.core.permissions import Authorizer, default_authorizer
from clinic_scheduler.domain.appointments.models import (
    Appointment, AppointmentStatus, RecurrenceRule
)
from clinic_scheduler.domain.appointments.overlap import OverlapChecker, OverlapScope
from clinic_scheduler.domain.appointments.recurrence import RecurrenceExpander, exceeds_occurrence_limit
from clinic_scheduler.domain.appointments.repository import AppointmentRepository
from clinic_scheduler.domain.notifications.models import NotificationType
from clinic_scheduler.domain.notifications.service import NotificationService
from clinic_scheduler.domain.users.models import User, UserRole
from clinic_scheduler.domain.users.repository import UserRepository
from clinic_scheduler.domain.workplaces.repository import WorkplaceRepository

logger = logging.getLogger(__name__)

# scheduled is the only status that can be left
ALLOWED_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED},
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.COMPLETED: set(),
}

UPDATABLE_FIELDS = (
    "patient_id", "doctor_id", "workplace_id", "start_time", "end_time", "status", "notes"
)


def to_naive_utc(value: datetime) -> datetime:
    """Store datetimes as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def validate_time_range(start_time: datetime, end_time: datetime) -> None:
    if start_time >= end_time:
        raise BadRequestError(
            "End time must be after start time",
            details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()}
        )


def parse_recurrence_rule(value) -> Optional[RecurrenceRule]:
    if value is None or value == "":
        return None
    try:
        return RecurrenceRule(value)
    except ValueError:
        raise BadRequestError(
            f"Unknown recurrence rule: {value}",
            details={"allowed": [r.value for r in RecurrenceRule]}
        )


def parse_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise BadRequestError(
            f"Unknown appointment status: {value}",
            details={"allowed": [s.value for s in AppointmentStatus]}
        )


class AppointmentService:
    """Service layer for appointment management"""

    def __init__(
        self,
        db,
        authorizer: Authorizer = default_authorizer,
        notification_service: Optional[NotificationService] = None
    ):
        self.db = db
        self.authorizer = authorizer
        self.appointment_repo = AppointmentRepository(db)
        self.user_repo = UserRepository(db)
        self.workplace_repo = WorkplaceRepository(db)
        self.overlap = OverlapChecker(db)
        self.recurrence = RecurrenceExpander(db, self.overlap)
        self.notifications = notification_service or NotificationService(db)

    # ==================== Helpers ====================

    def _resolve_user(self, user_id: uuid.UUID, role: UserRole, label: str) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"{label} with ID {user_id} not found")
        if user.role != role:
            raise BadRequestError(f"User {user_id} is not a {role.value}")
        return user

    def _resolve_workplace(self, workplace_id: Optional[uuid.UUID]) -> None:
        if workplace_id is not None and not self.workplace_repo.get_by_id(workplace_id):
            raise NotFoundError(f"Workplace with ID {workplace_id} not found")

    def _lock_owners(self, *user_ids: uuid.UUID) -> None:
        # Fixed order so two bookings never wait on each other's locks
        for user_id in sorted({u for u in user_ids if u is not None}, key=str):
            self.user_repo.lock(user_id)

    def _ensure_available(
        self,
        doctor_id: uuid.UUID,
        patient_id: Optional[uuid.UUID],
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[uuid.UUID] = None
    ) -> None:
        clash = self.overlap.find_conflict(OverlapScope.DOCTOR, doctor_id, start_time, end_time, exclude_id)
        if clash:
            raise ConflictError(
                "Doctor is already booked at this time",
                details={"conflicting_appointment_id": str(clash.id)}
            )
        if patient_id is not None:
            clash = self.overlap.find_conflict(OverlapScope.PATIENT, patient_id, start_time, end_time, exclude_id)
            if clash:
                raise ConflictError(
                    "Patient already has an appointment at this time",
                    details={"conflicting_appointment_id": str(clash.id)}
                )

    def _notify(self, appointment: Appointment, notification_type: NotificationType) -> None:
        """Best-effort notification; failures never undo the appointment change"""
        try:
            self.notifications.notify_appointment(appointment, notification_type)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(
                f"Failed to send {notification_type.value} notifications for appointment {appointment.id}"
            )

    def _can_view(self, appointment: Appointment, actor: User) -> bool:
        if self.authorizer.is_privileged(actor):
            return True
        return actor.id in (appointment.doctor_id, appointment.patient_id)

    # ==================== Commands ====================

    def create_appointment(
        self,
        patient_id: uuid.UUID,
        doctor_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        actor: User,
        notes: Optional[str] = None,
        workplace_id: Optional[uuid.UUID] = None,
        recurrence_rule: Optional[Union[RecurrenceRule, str]] = None,
        recurrence_end_date: Optional[Union[date, datetime]] = None
    ) -> Appointment:
        """Book a new appointment, expanding a recurring series if requested"""
        self.authorizer.require_privileged(actor, "Only administrators may book appointments")

        start_time = to_naive_utc(start_time)
        end_time = to_naive_utc(end_time)
        validate_time_range(start_time, end_time)
        rule = parse_recurrence_rule(recurrence_rule)
        if isinstance(recurrence_end_date, datetime):
            recurrence_end_date = to_naive_utc(recurrence_end_date).date()
        if rule and recurrence_end_date and exceeds_occurrence_limit(start_time, rule, recurrence_end_date):
            raise BadRequestError(
                f"Recurring series may not exceed {settings.RECURRENCE_MAX_OCCURRENCES} occurrences",
                details={"recurrence_end_date": recurrence_end_date.isoformat()}
            )

        self._resolve_user(patient_id, UserRole.PATIENT, "Patient")
        self._resolve_user(doctor_id, UserRole.DOCTOR, "Doctor")
        self._resolve_workplace(workplace_id)

        try:
            self._lock_owners(doctor_id, patient_id)
            self._ensure_available(doctor_id, patient_id, start_time, end_time)

            appointment = self.appointment_repo.create({
                "patient_id": patient_id,
                "doctor_id": doctor_id,
                "workplace_id": workplace_id,
                "start_time": start_time,
                "end_time": end_time,
                "notes": notes,
                "status": AppointmentStatus.SCHEDULED,
                "recurrence_rule": rule,
                "recurrence_end_date": recurrence_end_date,
            })

            if rule and recurrence_end_date:
                self.recurrence.expand(appointment, rule, recurrence_end_date)

            self.db.commit()
        except IntegrityError:
            # Raced past the overlap check; the exclusion constraint caught it
            self.db.rollback()
            raise ConflictError("Doctor is already booked at this time")
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Created appointment {appointment.id} for doctor {doctor_id}")
        self._notify(appointment, NotificationType.APPOINTMENT_CREATED)
        return appointment

    def update_appointment(
        self,
        appointment_id: uuid.UUID,
        update_data: dict,
        actor: User
    ) -> Appointment:
        """Apply a partial update, re-checking times and owners when they change"""
        self.authorizer.require_privileged(actor, "Only administrators may change appointments")

        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment with ID {appointment_id} not found")

        changes = {k: v for k, v in update_data.items() if k in UPDATABLE_FIELDS}
        for key in ("patient_id", "doctor_id", "start_time", "end_time", "status"):
            if key in changes and changes[key] is None:
                changes.pop(key)

        previous_status = appointment.status
        new_status = previous_status
        if "status" in changes:
            new_status = parse_status(changes["status"])
            if new_status != previous_status and new_status not in ALLOWED_TRANSITIONS[previous_status]:
                raise BadRequestError(
                    f"Cannot change status from {previous_status.value} to {new_status.value}"
                )
            changes["status"] = new_status

        if "start_time" in changes:
            changes["start_time"] = to_naive_utc(changes["start_time"])
        if "end_time" in changes:
            changes["end_time"] = to_naive_utc(changes["end_time"])

        start_time = changes.get("start_time", appointment.start_time)
        end_time = changes.get("end_time", appointment.end_time)
        doctor_id = changes.get("doctor_id", appointment.doctor_id)
        patient_id = changes.get("patient_id", appointment.patient_id)

        times_changed = "start_time" in changes or "end_time" in changes
        if times_changed:
            validate_time_range(start_time, end_time)
        if "patient_id" in changes and patient_id != appointment.patient_id:
            self._resolve_user(patient_id, UserRole.PATIENT, "Patient")
        if "doctor_id" in changes and doctor_id != appointment.doctor_id:
            self._resolve_user(doctor_id, UserRole.DOCTOR, "Doctor")
        if "workplace_id" in changes:
            self._resolve_workplace(changes["workplace_id"])

        owners_changed = doctor_id != appointment.doctor_id or patient_id != appointment.patient_id

        try:
            if (times_changed or owners_changed) and new_status != AppointmentStatus.CANCELLED:
                self._lock_owners(doctor_id, patient_id)
                self._ensure_available(doctor_id, patient_id, start_time, end_time, exclude_id=appointment.id)

            self.appointment_repo.update(appointment, changes)
            self.db.commit()
        except IntegrityError:
            # Raced past the overlap check; the exclusion constraint caught it
            self.db.rollback()
            raise ConflictError("Doctor is already booked at this time")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(appointment)
        cancelled = (
            previous_status != AppointmentStatus.CANCELLED
            and appointment.status == AppointmentStatus.CANCELLED
        )
        self._notify(
            appointment,
            NotificationType.APPOINTMENT_CANCELLED if cancelled else NotificationType.APPOINTMENT_UPDATED
        )
        return appointment

    def cancel_appointment(self, appointment_id: uuid.UUID, actor: User) -> Appointment:
        return self.update_appointment(
            appointment_id, {"status": AppointmentStatus.CANCELLED}, actor
        )

    def remove_appointment(self, appointment_id: uuid.UUID, actor: User) -> None:
        """Delete an appointment, notifying its participants first"""
        self.authorizer.require_privileged(actor, "Only administrators may delete appointments")

        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment with ID {appointment_id} not found")

        # Notifications read patient and doctor names from the live record
        self._notify(appointment, NotificationType.APPOINTMENT_CANCELLED)

        try:
            self.appointment_repo.delete(appointment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Deleted appointment {appointment_id}")

    # ==================== Queries ====================

    def get_appointment(self, appointment_id: uuid.UUID, actor: User) -> Appointment:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment with ID {appointment_id} not found")
        if not self._can_view(appointment, actor):
            raise AuthorizationError("Not authorized to view this appointment")
        return appointment

    def list_appointments(
        self,
        actor: User,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> List[Appointment]:
        """All visible appointments ordered by start; a range filters on start_time inclusively"""
        filters = {}
        if not self.authorizer.is_privileged(actor):
            if actor.role == UserRole.DOCTOR:
                filters["doctor_id"] = actor.id
            else:
                filters["patient_id"] = actor.id
        if start_date is not None:
            filters["start_from"] = to_naive_utc(start_date)
        if end_date is not None:
            filters["start_to"] = to_naive_utc(end_date)
        return self.appointment_repo.get_all(**filters)

    def find_by_date_range(self, start_date: datetime, end_date: datetime, actor: User) -> List[Appointment]:
        return self.list_appointments(actor, start_date, end_date)

    def get_occurrences(self, appointment_id: uuid.UUID, actor: User) -> List[Appointment]:
        """Generated occurrences of a recurring appointment"""
        parent = self.get_appointment(appointment_id, actor)
        return self.appointment_repo.get_children(parent.id)
