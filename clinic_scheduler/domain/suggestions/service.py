"""
Appointment Suggestions Service Layer

Doctors propose appointments; privileged users review them. Approving a
suggestion books the appointment through AppointmentService, so the same
validation and overlap checks apply as for a direct booking.
"""

from typing import Optional, List, Union
from datetime import datetime, timezone
import logging
import uuid

from clinic_scheduler.core.exceptions import (
    BadRequestError, ConflictError, NotFoundError, AuthorizationError
)
from clinic_scheduler.core.permissions import Authorizer, default_authorizer
from clinic_scheduler.domain.appointments.overlap import OverlapChecker
from clinic_scheduler.domain.appointments.service import (
    AppointmentService, to_naive_utc, validate_time_range
)
from clinic_scheduler.domain.notifications.models import NotificationType
from clinic_scheduler.domain.notifications.service import NotificationService
from clinic_scheduler.domain.suggestions.models import AppointmentSuggestion, SuggestionStatus
from clinic_scheduler.domain.suggestions.repository import SuggestionRepository
from clinic_scheduler.domain.users.models import User, UserRole
from clinic_scheduler.domain.users.repository import UserRepository
from clinic_scheduler.domain.workplaces.repository import WorkplaceRepository

logger = logging.getLogger(__name__)


class SuggestionService:
    """Service layer for the doctor-proposes, admin-approves workflow"""

    def __init__(
        self,
        db,
        authorizer: Authorizer = default_authorizer,
        appointment_service: Optional[AppointmentService] = None,
        notification_service: Optional[NotificationService] = None
    ):
        self.db = db
        self.authorizer = authorizer
        self.suggestion_repo = SuggestionRepository(db)
        self.user_repo = UserRepository(db)
        self.workplace_repo = WorkplaceRepository(db)
        self.overlap = OverlapChecker(db)
        self.notifications = notification_service or NotificationService(db)
        self.appointments = appointment_service or AppointmentService(
            db, authorizer, self.notifications
        )

    def _notify(self, recipients: List[uuid.UUID], title: str, message: str) -> None:
        """Best-effort system notifications"""
        try:
            for user_id in recipients:
                self.notifications.create(user_id, NotificationType.SYSTEM, title, message)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Failed to send suggestion notification '{title}'")

    def create_suggestion(
        self,
        patient_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        doctor: User,
        notes: Optional[str] = None,
        workplace_id: Optional[uuid.UUID] = None
    ) -> AppointmentSuggestion:
        """Propose an appointment on behalf of the calling doctor"""
        self.authorizer.require_role(doctor, UserRole.DOCTOR, "Only doctors can suggest appointments")

        patient = self.user_repo.get_by_id(patient_id)
        if not patient or patient.role != UserRole.PATIENT:
            raise BadRequestError(f"User {patient_id} is not a patient")

        start_time = to_naive_utc(start_time)
        end_time = to_naive_utc(end_time)
        validate_time_range(start_time, end_time)

        if workplace_id is not None and not self.workplace_repo.get_by_id(workplace_id):
            raise NotFoundError(f"Workplace with ID {workplace_id} not found")

        # Patient availability is checked when the suggestion is approved
        if self.overlap.doctor_has_conflict(doctor.id, start_time, end_time):
            raise ConflictError("You already have an appointment at this time")

        suggestion = self.suggestion_repo.create({
            "doctor_id": doctor.id,
            "patient_id": patient_id,
            "workplace_id": workplace_id,
            "start_time": start_time,
            "end_time": end_time,
            "notes": notes,
            "status": SuggestionStatus.PENDING,
        })
        self.db.commit()
        self.db.refresh(suggestion)
        logger.info(f"Doctor {doctor.id} suggested appointment {suggestion.id}")

        reviewers = [u.id for u in self.user_repo.get_by_roles(self.authorizer.privileged_roles())]
        self._notify(
            reviewers,
            "New appointment suggestion",
            f"{doctor.full_name} suggested an appointment with {patient.full_name} "
            f"on {start_time:%Y-%m-%d} at {start_time:%H:%M}."
        )
        return suggestion

    def list_suggestions(self, user: User) -> List[AppointmentSuggestion]:
        """Doctors see their own suggestions, privileged users see all"""
        if self.authorizer.is_privileged(user):
            return self.suggestion_repo.get_all()
        if self.authorizer.has_role(user, UserRole.DOCTOR):
            return self.suggestion_repo.get_all(doctor_id=user.id)
        raise AuthorizationError("Not authorized to view appointment suggestions")

    def get_suggestion(self, suggestion_id: uuid.UUID, user: User) -> AppointmentSuggestion:
        suggestion = self.suggestion_repo.get_by_id(suggestion_id)
        if not suggestion:
            raise NotFoundError(f"Suggestion with ID {suggestion_id} not found")
        if not self.authorizer.can_view_suggestion(user, suggestion):
            raise AuthorizationError("Not authorized to view this suggestion")
        return suggestion

    def decide(
        self,
        suggestion_id: uuid.UUID,
        status: Union[SuggestionStatus, str],
        reviewer: User
    ) -> AppointmentSuggestion:
        """Approve or reject a pending suggestion.

        Approval books the appointment in the same transaction that marks the
        suggestion approved; if booking fails (for example on a conflict) the
        suggestion stays pending.
        """
        self.authorizer.require_privileged(reviewer, "Only administrators can review suggestions")

        try:
            decision = SuggestionStatus(status)
        except ValueError:
            raise BadRequestError(f"Unknown suggestion status: {status}")
        if decision == SuggestionStatus.PENDING:
            raise BadRequestError("A suggestion can only be approved or rejected")

        try:
            suggestion = self.suggestion_repo.lock(suggestion_id)
            if not suggestion:
                raise NotFoundError(f"Suggestion with ID {suggestion_id} not found")
            if suggestion.status != SuggestionStatus.PENDING:
                raise ConflictError(
                    f"Suggestion has already been {suggestion.status.value}",
                    details={"status": suggestion.status.value}
                )

            self.suggestion_repo.update(suggestion, {
                "status": decision,
                "reviewed_at": datetime.now(timezone.utc).replace(tzinfo=None),
                "reviewed_by": reviewer.id,
            })

            if decision == SuggestionStatus.APPROVED:
                # Commits the suggestion together with the appointment
                appointment = self.appointments.create_appointment(
                    patient_id=suggestion.patient_id,
                    doctor_id=suggestion.doctor_id,
                    start_time=suggestion.start_time,
                    end_time=suggestion.end_time,
                    actor=reviewer,
                    notes=suggestion.notes,
                    workplace_id=suggestion.workplace_id,
                )
                self.suggestion_repo.update(suggestion, {"appointment_id": appointment.id})

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(suggestion)
        logger.info(f"Suggestion {suggestion.id} {decision.value} by {reviewer.id}")

        self._notify(
            [suggestion.doctor_id],
            f"Suggestion {decision.value}",
            f"Your suggested appointment on {suggestion.start_time:%Y-%m-%d} "
            f"at {suggestion.start_time:%H:%M} was {decision.value}."
        )
        return suggestion
