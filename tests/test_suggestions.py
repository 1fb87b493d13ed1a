import pytest
from datetime import datetime, timedelta
from uuid import uuid4

from clinic_scheduler.core.exceptions import (
    AuthorizationError, BadRequestError, ConflictError, NotFoundError
)
from clinic_scheduler.domain.appointments.models import Appointment
from clinic_scheduler.domain.appointments.service import AppointmentService
from clinic_scheduler.domain.notifications.models import Notification, NotificationType
from clinic_scheduler.domain.suggestions.models import SuggestionStatus
from clinic_scheduler.domain.suggestions.service import SuggestionService
from clinic_scheduler.domain.users.models import UserRole


START = datetime(2024, 6, 3, 14, 0)
END = datetime(2024, 6, 3, 14, 45)


@pytest.fixture
def suggestion(db_session, doctor, patient):
    return SuggestionService(db_session).create_suggestion(patient.id, START, END, doctor, notes="Follow-up")


@pytest.mark.suggestions
class TestCreateSuggestion:
    """Doctors proposing appointments."""

    def test_doctor_creates_pending_suggestion(self, db_session, admin, suggestion, doctor, patient) -> None:
        assert suggestion.status == SuggestionStatus.PENDING
        assert suggestion.doctor_id == doctor.id
        assert suggestion.patient_id == patient.id
        assert suggestion.reviewed_at is None
        assert db_session.query(Appointment).count() == 0

    def test_privileged_users_are_notified(self, db_session, admin, make_user, doctor, patient) -> None:
        root = make_user(UserRole.ROOT_USER)

        SuggestionService(db_session).create_suggestion(patient.id, START, END, doctor)

        notified = {
            n.user_id for n in db_session.query(Notification).filter(
                Notification.type == NotificationType.SYSTEM
            )
        }
        assert notified == {admin.id, root.id}

    def test_only_doctors_may_suggest(self, db_session, admin, patient) -> None:
        with pytest.raises(AuthorizationError):
            SuggestionService(db_session).create_suggestion(patient.id, START, END, admin)

    def test_target_must_be_a_patient(self, db_session, doctor, other_doctor) -> None:
        with pytest.raises(BadRequestError):
            SuggestionService(db_session).create_suggestion(other_doctor.id, START, END, doctor)

    def test_time_order_is_validated(self, db_session, doctor, patient) -> None:
        with pytest.raises(BadRequestError):
            SuggestionService(db_session).create_suggestion(patient.id, END, START, doctor)

    def test_doctor_conflict_is_rejected(
        self, db_session, doctor, patient, other_patient, make_appointment
    ) -> None:
        make_appointment(other_patient, doctor, START, END)

        with pytest.raises(ConflictError):
            SuggestionService(db_session).create_suggestion(patient.id, START, END, doctor)

    def test_patient_calendar_is_not_checked_on_create(
        self, db_session, doctor, other_doctor, patient, make_appointment
    ) -> None:
        make_appointment(patient, other_doctor, START, END)

        suggestion = SuggestionService(db_session).create_suggestion(patient.id, START, END, doctor)

        assert suggestion.status == SuggestionStatus.PENDING


@pytest.mark.suggestions
class TestReadSuggestions:
    """Visibility rules."""

    def test_doctor_sees_only_own(self, db_session, suggestion, other_doctor, patient) -> None:
        service = SuggestionService(db_session)
        theirs = service.create_suggestion(patient.id, START + timedelta(days=1), END + timedelta(days=1), other_doctor)

        assert [s.id for s in service.list_suggestions(other_doctor)] == [theirs.id]

    def test_admin_sees_all(self, db_session, suggestion, other_doctor, patient, admin) -> None:
        service = SuggestionService(db_session)
        service.create_suggestion(patient.id, START + timedelta(days=1), END + timedelta(days=1), other_doctor)

        assert len(service.list_suggestions(admin)) == 2

    def test_patients_cannot_list(self, db_session, suggestion, patient) -> None:
        with pytest.raises(AuthorizationError):
            SuggestionService(db_session).list_suggestions(patient)

    def test_get_by_other_doctor_is_forbidden(self, db_session, suggestion, other_doctor) -> None:
        with pytest.raises(AuthorizationError):
            SuggestionService(db_session).get_suggestion(suggestion.id, other_doctor)

    def test_get_missing_is_not_found(self, db_session, admin) -> None:
        with pytest.raises(NotFoundError):
            SuggestionService(db_session).get_suggestion(uuid4(), admin)


@pytest.mark.suggestions
class TestDecideSuggestion:
    """Approval and rejection."""

    def test_approval_books_exactly_one_appointment(self, db_session, suggestion, admin) -> None:
        service = SuggestionService(db_session)

        approved = service.decide(suggestion.id, "approved", admin)

        assert approved.status == SuggestionStatus.APPROVED
        assert approved.reviewed_by == admin.id
        assert approved.reviewed_at is not None
        assert approved.reviewed_at.tzinfo is None
        appointments = db_session.query(Appointment).all()
        assert len(appointments) == 1
        assert approved.appointment_id == appointments[0].id
        assert appointments[0].start_time == START
        assert appointments[0].notes == "Follow-up"

    def test_second_approval_fails_without_booking(self, db_session, suggestion, admin) -> None:
        service = SuggestionService(db_session)
        service.decide(suggestion.id, SuggestionStatus.APPROVED, admin)

        with pytest.raises(ConflictError):
            service.decide(suggestion.id, SuggestionStatus.APPROVED, admin)
        assert db_session.query(Appointment).count() == 1

    def test_rejection_has_no_side_effect(self, db_session, suggestion, admin, doctor) -> None:
        service = SuggestionService(db_session)

        rejected = service.decide(suggestion.id, "rejected", admin)

        assert rejected.status == SuggestionStatus.REJECTED
        assert rejected.reviewed_by == admin.id
        assert db_session.query(Appointment).count() == 0
        doctor_notes = db_session.query(Notification).filter(Notification.user_id == doctor.id).all()
        assert any("rejected" in n.message for n in doctor_notes)

    def test_rejected_suggestion_cannot_be_approved(self, db_session, suggestion, admin) -> None:
        service = SuggestionService(db_session)
        service.decide(suggestion.id, "rejected", admin)

        with pytest.raises(ConflictError):
            service.decide(suggestion.id, "approved", admin)
        assert db_session.query(Appointment).count() == 0

    def test_approval_of_a_taken_slot_stays_pending(
        self, db_session, suggestion, admin, patient, doctor
    ) -> None:
        # The slot got booked directly after the suggestion was made
        AppointmentService(db_session).create_appointment(
            patient.id, doctor.id, START, END, admin
        )

        with pytest.raises(ConflictError):
            SuggestionService(db_session).decide(suggestion.id, "approved", admin)

        db_session.refresh(suggestion)
        assert suggestion.status == SuggestionStatus.PENDING
        assert suggestion.reviewed_by is None

    def test_only_privileged_users_decide(self, db_session, suggestion, doctor) -> None:
        with pytest.raises(AuthorizationError):
            SuggestionService(db_session).decide(suggestion.id, "approved", doctor)

    @pytest.mark.parametrize("status", ["pending", "maybe"])
    def test_invalid_decision_is_rejected(self, db_session, suggestion, admin, status) -> None:
        with pytest.raises(BadRequestError):
            SuggestionService(db_session).decide(suggestion.id, status, admin)

    def test_missing_suggestion_is_not_found(self, db_session, admin) -> None:
        with pytest.raises(NotFoundError):
            SuggestionService(db_session).decide(uuid4(), "approved", admin)
