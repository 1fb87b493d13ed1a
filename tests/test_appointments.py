import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

from clinic_scheduler.core.exceptions import (
    BadRequestError, ConflictError, NotFoundError, AuthorizationError
)
from clinic_scheduler.domain.appointments.models import Appointment, AppointmentStatus
from clinic_scheduler.domain.appointments.service import AppointmentService
from clinic_scheduler.domain.notifications.models import Notification, NotificationType
from clinic_scheduler.domain.notifications.service import NotificationService


START = datetime(2024, 3, 4, 9, 0)
END = datetime(2024, 3, 4, 9, 30)


def notifications_of(db_session, notification_type):
    return db_session.query(Notification).filter(Notification.type == notification_type).all()


@pytest.mark.appointments
class TestCreateAppointment:
    """Booking through the lifecycle manager."""

    def test_create_success_notifies_both_participants(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)

        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin, notes="Checkup")

        assert appointment.id is not None
        assert appointment.status == AppointmentStatus.SCHEDULED
        assert appointment.notes == "Checkup"
        created = notifications_of(db_session, NotificationType.APPOINTMENT_CREATED)
        assert {n.user_id for n in created} == {patient.id, doctor.id}
        assert all(n.appointment_id == appointment.id for n in created)

    @pytest.mark.parametrize("end", [START, START - timedelta(minutes=30)])
    def test_start_must_precede_end(self, db_session, admin, patient, doctor, end) -> None:
        with pytest.raises(BadRequestError):
            AppointmentService(db_session).create_appointment(patient.id, doctor.id, START, end, admin)
        assert db_session.query(Appointment).count() == 0

    def test_missing_patient_is_not_found(self, db_session, admin, doctor) -> None:
        with pytest.raises(NotFoundError):
            AppointmentService(db_session).create_appointment(uuid4(), doctor.id, START, END, admin)

    def test_participant_roles_are_checked(self, db_session, admin, patient, other_patient) -> None:
        with pytest.raises(BadRequestError):
            AppointmentService(db_session).create_appointment(patient.id, other_patient.id, START, END, admin)

    def test_missing_workplace_is_not_found(self, db_session, admin, patient, doctor) -> None:
        with pytest.raises(NotFoundError):
            AppointmentService(db_session).create_appointment(
                patient.id, doctor.id, START, END, admin, workplace_id=uuid4()
            )

    def test_doctor_double_booking_conflicts(
        self, db_session, admin, patient, other_patient, doctor
    ) -> None:
        service = AppointmentService(db_session)
        service.create_appointment(patient.id, doctor.id, START, END, admin)

        with pytest.raises(ConflictError):
            service.create_appointment(
                other_patient.id, doctor.id, START + timedelta(minutes=15), END + timedelta(minutes=15), admin
            )
        assert db_session.query(Appointment).count() == 1

    def test_patient_double_booking_conflicts(
        self, db_session, admin, patient, doctor, other_doctor
    ) -> None:
        service = AppointmentService(db_session)
        service.create_appointment(patient.id, doctor.id, START, END, admin)

        with pytest.raises(ConflictError):
            service.create_appointment(patient.id, other_doctor.id, START, END, admin)

    def test_back_to_back_bookings_are_allowed(self, db_session, admin, patient, other_patient, doctor) -> None:
        service = AppointmentService(db_session)
        service.create_appointment(patient.id, doctor.id, START, END, admin)

        second = service.create_appointment(other_patient.id, doctor.id, END, END + timedelta(minutes=30), admin)

        assert second.start_time == END

    def test_aware_datetimes_are_stored_as_utc(self, db_session, admin, patient, doctor) -> None:
        tz = timezone(timedelta(hours=2))
        appointment = AppointmentService(db_session).create_appointment(
            patient.id, doctor.id,
            datetime(2024, 3, 4, 11, 0, tzinfo=tz), datetime(2024, 3, 4, 11, 30, tzinfo=tz),
            admin
        )

        assert appointment.start_time == datetime(2024, 3, 4, 9, 0)
        assert appointment.end_time == datetime(2024, 3, 4, 9, 30)

    def test_only_privileged_users_may_book(self, db_session, patient, doctor) -> None:
        with pytest.raises(AuthorizationError):
            AppointmentService(db_session).create_appointment(patient.id, doctor.id, START, END, doctor)

    def test_weekly_recurrence_creates_series(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)

        parent = service.create_appointment(
            patient.id, doctor.id,
            datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 9, 30), admin,
            recurrence_rule="weekly", recurrence_end_date=date(2024, 1, 22)
        )

        children = service.get_occurrences(parent.id, admin)
        assert [c.start_time.date() for c in children] == [
            date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22)
        ]
        assert db_session.query(Appointment).count() == 4

    def test_recurrence_without_end_date_books_once(self, db_session, admin, patient, doctor) -> None:
        AppointmentService(db_session).create_appointment(
            patient.id, doctor.id, START, END, admin, recurrence_rule="daily"
        )

        assert db_session.query(Appointment).count() == 1

    def test_unknown_recurrence_rule_is_rejected(self, db_session, admin, patient, doctor) -> None:
        with pytest.raises(BadRequestError):
            AppointmentService(db_session).create_appointment(
                patient.id, doctor.id, START, END, admin,
                recurrence_rule="yearly", recurrence_end_date=date(2025, 1, 1)
            )
        assert db_session.query(Appointment).count() == 0

    def test_series_longer_than_the_cap_is_rejected(self, db_session, admin, patient, doctor) -> None:
        with pytest.raises(BadRequestError):
            AppointmentService(db_session).create_appointment(
                patient.id, doctor.id,
                datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 9, 30), admin,
                recurrence_rule="daily", recurrence_end_date=date(2025, 12, 31)
            )
        assert db_session.query(Appointment).count() == 0

    def test_notification_failure_does_not_undo_booking(self, db_session, admin, patient, doctor) -> None:
        with patch.object(NotificationService, "notify_appointment", side_effect=RuntimeError("boom")):
            appointment = AppointmentService(db_session).create_appointment(
                patient.id, doctor.id, START, END, admin
            )

        assert db_session.query(Appointment).filter(Appointment.id == appointment.id).count() == 1
        assert db_session.query(Notification).count() == 0


@pytest.mark.appointments
class TestUpdateAppointment:
    """Partial updates and status transitions."""

    def test_cancelling_frees_the_slot(self, db_session, admin, patient, other_patient, doctor) -> None:
        service = AppointmentService(db_session)
        first = service.create_appointment(patient.id, doctor.id, START, END, admin)

        cancelled = service.update_appointment(first.id, {"status": "cancelled"}, admin)
        replacement = service.create_appointment(other_patient.id, doctor.id, START, END, admin)

        assert cancelled.status == AppointmentStatus.CANCELLED
        assert replacement.id != first.id
        assert len(notifications_of(db_session, NotificationType.APPOINTMENT_CANCELLED)) == 2

    def test_moving_onto_a_busy_slot_conflicts(
        self, db_session, admin, patient, other_patient, doctor
    ) -> None:
        service = AppointmentService(db_session)
        service.create_appointment(patient.id, doctor.id, START, END, admin)
        later = service.create_appointment(
            other_patient.id, doctor.id, START + timedelta(hours=1), END + timedelta(hours=1), admin
        )

        with pytest.raises(ConflictError):
            service.update_appointment(later.id, {"start_time": START, "end_time": END}, admin)

        db_session.refresh(later)
        assert later.start_time == START + timedelta(hours=1)

    def test_shifting_overlapping_itself_is_allowed(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        moved = service.update_appointment(
            appointment.id,
            {"start_time": START + timedelta(minutes=15), "end_time": END + timedelta(minutes=15)},
            admin
        )

        assert moved.start_time == START + timedelta(minutes=15)
        assert len(notifications_of(db_session, NotificationType.APPOINTMENT_UPDATED)) == 2

    def test_changing_only_end_revalidates_order(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        with pytest.raises(BadRequestError):
            service.update_appointment(appointment.id, {"end_time": START - timedelta(minutes=1)}, admin)

    def test_changing_doctor_checks_new_doctor(
        self, db_session, admin, patient, other_patient, doctor, other_doctor
    ) -> None:
        service = AppointmentService(db_session)
        service.create_appointment(other_patient.id, other_doctor.id, START, END, admin)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        with pytest.raises(ConflictError):
            service.update_appointment(appointment.id, {"doctor_id": other_doctor.id}, admin)

    def test_changing_doctor_to_a_patient_is_rejected(
        self, db_session, admin, patient, other_patient, doctor
    ) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        with pytest.raises(BadRequestError):
            service.update_appointment(appointment.id, {"doctor_id": other_patient.id}, admin)

    @pytest.mark.parametrize("final_status, next_status", [
        ("cancelled", "scheduled"),
        ("cancelled", "completed"),
        ("completed", "cancelled"),
    ])
    def test_terminal_statuses_cannot_change(
        self, db_session, admin, patient, doctor, final_status, next_status
    ) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)
        service.update_appointment(appointment.id, {"status": final_status}, admin)

        with pytest.raises(BadRequestError):
            service.update_appointment(appointment.id, {"status": next_status}, admin)

    def test_unknown_status_is_rejected(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        with pytest.raises(BadRequestError):
            service.update_appointment(appointment.id, {"status": "postponed"}, admin)

    def test_missing_appointment_is_not_found(self, db_session, admin) -> None:
        with pytest.raises(NotFoundError):
            AppointmentService(db_session).update_appointment(uuid4(), {"notes": "x"}, admin)


@pytest.mark.appointments
class TestRemoveAppointment:
    """Deletion and its notifications."""

    def test_remove_notifies_with_names_then_deletes(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        service.remove_appointment(appointment.id, admin)

        assert db_session.query(Appointment).count() == 0
        cancelled = notifications_of(db_session, NotificationType.APPOINTMENT_CANCELLED)
        by_user = {n.user_id: n.message for n in cancelled}
        assert "Gregory House" in by_user[patient.id]
        assert "John Doe" in by_user[doctor.id]

    def test_remove_keeps_children(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)
        parent = service.create_appointment(
            patient.id, doctor.id, START, END, admin,
            recurrence_rule="daily", recurrence_end_date=date(2024, 3, 6)
        )

        service.remove_appointment(parent.id, admin)

        db_session.expire_all()
        children = db_session.query(Appointment).all()
        assert len(children) == 2
        assert all(child.parent_appointment_id is None for child in children)

    def test_remove_detaches_notifications(self, db_session, admin, patient, doctor) -> None:
        service = AppointmentService(db_session)
        appointment = service.create_appointment(patient.id, doctor.id, START, END, admin)

        service.remove_appointment(appointment.id, admin)

        db_session.expire_all()
        remaining = db_session.query(Notification).all()
        assert remaining
        assert all(n.appointment_id is None for n in remaining)

    def test_remove_missing_is_not_found(self, db_session, admin) -> None:
        with pytest.raises(NotFoundError):
            AppointmentService(db_session).remove_appointment(uuid4(), admin)


@pytest.mark.appointments
class TestQueryAppointments:
    """Listing and date-range lookups."""

    def test_find_by_date_range_is_inclusive_and_ordered(
        self, db_session, admin, patient, doctor, make_appointment
    ) -> None:
        base = datetime(2024, 5, 1, 9, 0)
        for hours in (2, 0, 1):
            start = base + timedelta(hours=hours)
            make_appointment(patient, doctor, start, start + timedelta(minutes=30))

        found = AppointmentService(db_session).find_by_date_range(base, base + timedelta(hours=1), admin)

        assert [a.start_time for a in found] == [base, base + timedelta(hours=1)]

    def test_list_is_scoped_to_participants(
        self, db_session, admin, patient, other_patient, doctor, other_doctor, make_appointment
    ) -> None:
        mine = make_appointment(patient, doctor, START, END)
        make_appointment(other_patient, other_doctor, START, END)
        service = AppointmentService(db_session)

        assert [a.id for a in service.list_appointments(patient)] == [mine.id]
        assert [a.id for a in service.list_appointments(doctor)] == [mine.id]
        assert len(service.list_appointments(admin)) == 2

    def test_get_foreign_appointment_is_forbidden(
        self, db_session, patient, other_patient, doctor, make_appointment
    ) -> None:
        appointment = make_appointment(patient, doctor, START, END)

        with pytest.raises(AuthorizationError):
            AppointmentService(db_session).get_appointment(appointment.id, other_patient)
