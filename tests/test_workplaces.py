import pytest
from datetime import datetime
from uuid import uuid4

from clinic_scheduler.core.exceptions import (
    AuthorizationError, BadRequestError, ConflictError, NotFoundError
)
from clinic_scheduler.domain.appointments.service import AppointmentService
from clinic_scheduler.domain.workplaces.service import WorkplaceService


@pytest.mark.workplaces
class TestWorkplaceService:
    """Workplace management and doctor assignments."""

    def test_create_and_list(self, db_session, admin, doctor) -> None:
        service = WorkplaceService(db_session)
        service.create_workplace({"name": "Room B"}, admin)
        service.create_workplace({"name": "Room A", "type": "surgery"}, admin)

        assert [w.name for w in service.list_workplaces(doctor)] == ["Room A", "Room B"]

    def test_duplicate_name_conflicts(self, db_session, admin, workplace) -> None:
        with pytest.raises(ConflictError):
            WorkplaceService(db_session).create_workplace({"name": workplace.name}, admin)

    def test_rename_to_existing_name_conflicts(self, db_session, admin, workplace) -> None:
        service = WorkplaceService(db_session)
        other = service.create_workplace({"name": "Cabinet 102"}, admin)

        with pytest.raises(ConflictError):
            service.update_workplace(other.id, {"name": workplace.name}, admin)

    def test_update_fields(self, db_session, admin, workplace) -> None:
        updated = WorkplaceService(db_session).update_workplace(
            workplace.id, {"location": "Second floor", "is_active": False}, admin
        )

        assert updated.location == "Second floor"
        assert updated.is_active is False

    def test_patients_cannot_read(self, db_session, patient, workplace) -> None:
        with pytest.raises(AuthorizationError):
            WorkplaceService(db_session).list_workplaces(patient)

    def test_doctors_cannot_write(self, db_session, doctor) -> None:
        with pytest.raises(AuthorizationError):
            WorkplaceService(db_session).create_workplace({"name": "Room C"}, doctor)

    def test_delete_in_use_is_rejected(self, db_session, admin, patient, doctor, workplace) -> None:
        AppointmentService(db_session).create_appointment(
            patient.id, doctor.id, datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 10), admin,
            workplace_id=workplace.id
        )

        with pytest.raises(BadRequestError):
            WorkplaceService(db_session).delete_workplace(workplace.id, admin)

    def test_delete_unused(self, db_session, admin, workplace) -> None:
        service = WorkplaceService(db_session)
        service.delete_workplace(workplace.id, admin)

        with pytest.raises(NotFoundError):
            service.get_workplace(workplace.id)

    def test_assign_and_unassign_doctor(self, db_session, admin, doctor, workplace) -> None:
        service = WorkplaceService(db_session)

        service.assign_doctor(workplace.id, doctor.id, admin)
        assert [d.id for d in service.list_doctors(workplace.id, admin)] == [doctor.id]

        with pytest.raises(ConflictError):
            service.assign_doctor(workplace.id, doctor.id, admin)

        service.unassign_doctor(workplace.id, doctor.id, admin)
        assert service.list_doctors(workplace.id, admin) == []

        with pytest.raises(NotFoundError):
            service.unassign_doctor(workplace.id, doctor.id, admin)

    def test_assign_requires_doctor(self, db_session, admin, patient, workplace) -> None:
        service = WorkplaceService(db_session)

        with pytest.raises(NotFoundError):
            service.assign_doctor(workplace.id, patient.id, admin)
        with pytest.raises(NotFoundError):
            service.assign_doctor(uuid4(), patient.id, admin)
