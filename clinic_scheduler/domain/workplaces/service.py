"""
Workplaces Service Layer

Manages rooms and cabinets and which doctors work in them.
"""

from typing import Optional, List
import logging
import uuid

from clinic_scheduler.core.exceptions import NotFoundError, ConflictError, BadRequestError
from clinic_scheduler.core.permissions import Authorizer, default_authorizer
from clinic_scheduler.domain.appointments.repository import AppointmentRepository
from clinic_scheduler.domain.users.models import User, UserRole
from clinic_scheduler.domain.users.repository import UserRepository
from clinic_scheduler.domain.workplaces.models import Workplace, DoctorWorkplace
from clinic_scheduler.domain.workplaces.repository import WorkplaceRepository

logger = logging.getLogger(__name__)


class WorkplaceService:
    """Service layer for workplace management"""

    def __init__(self, db, authorizer: Authorizer = default_authorizer):
        self.db = db
        self.authorizer = authorizer
        self.workplace_repo = WorkplaceRepository(db)
        self.user_repo = UserRepository(db)
        self.appointment_repo = AppointmentRepository(db)

    def _require_reader(self, actor: User) -> None:
        self.authorizer.require_any(actor, [UserRole.DOCTOR], "Not authorized to view workplaces")

    def _require_writer(self, actor: User) -> None:
        self.authorizer.require_privileged(actor, "Only administrators may manage workplaces")

    def create_workplace(self, workplace_data: dict, actor: User) -> Workplace:
        self._require_writer(actor)
        if self.workplace_repo.get_by_name(workplace_data["name"]):
            raise ConflictError(f"Workplace '{workplace_data['name']}' already exists")

        workplace = self.workplace_repo.create(workplace_data)
        self.db.commit()
        self.db.refresh(workplace)
        logger.info(f"Created workplace {workplace.id} ({workplace.name})")
        return workplace

    def list_workplaces(self, actor: User, active_only: bool = False) -> List[Workplace]:
        self._require_reader(actor)
        return self.workplace_repo.get_all(active_only=active_only)

    def get_workplace(self, workplace_id: uuid.UUID, actor: Optional[User] = None) -> Workplace:
        if actor is not None:
            self._require_reader(actor)
        workplace = self.workplace_repo.get_by_id(workplace_id)
        if not workplace:
            raise NotFoundError(f"Workplace with ID {workplace_id} not found")
        return workplace

    def update_workplace(self, workplace_id: uuid.UUID, update_data: dict, actor: User) -> Workplace:
        self._require_writer(actor)
        workplace = self.get_workplace(workplace_id)

        new_name = update_data.get("name")
        if new_name and new_name != workplace.name and self.workplace_repo.get_by_name(new_name):
            raise ConflictError(f"Workplace '{new_name}' already exists")

        workplace = self.workplace_repo.update(workplace, update_data)
        self.db.commit()
        self.db.refresh(workplace)
        return workplace

    def delete_workplace(self, workplace_id: uuid.UUID, actor: User) -> None:
        self._require_writer(actor)
        workplace = self.get_workplace(workplace_id)

        in_use = self.appointment_repo.count_for_workplace(workplace_id)
        if in_use:
            raise BadRequestError(
                "Workplace is referenced by appointments",
                details={"appointments": in_use}
            )

        self.workplace_repo.delete(workplace)
        self.db.commit()
        logger.info(f"Deleted workplace {workplace_id}")

    def assign_doctor(self, workplace_id: uuid.UUID, doctor_id: uuid.UUID, actor: User) -> DoctorWorkplace:
        self._require_writer(actor)
        self.get_workplace(workplace_id)

        doctor = self.user_repo.get_by_id(doctor_id)
        if not doctor or doctor.role != UserRole.DOCTOR:
            raise NotFoundError(f"Doctor with ID {doctor_id} not found")
        if self.workplace_repo.get_assignment(workplace_id, doctor_id):
            raise ConflictError("Doctor is already assigned to this workplace")

        link = self.workplace_repo.add_assignment(workplace_id, doctor_id)
        self.db.commit()
        self.db.refresh(link)
        return link

    def unassign_doctor(self, workplace_id: uuid.UUID, doctor_id: uuid.UUID, actor: User) -> None:
        self._require_writer(actor)
        link = self.workplace_repo.get_assignment(workplace_id, doctor_id)
        if not link:
            raise NotFoundError("Doctor is not assigned to this workplace")
        self.workplace_repo.remove_assignment(link)
        self.db.commit()

    def list_doctors(self, workplace_id: uuid.UUID, actor: User) -> List[User]:
        self._require_reader(actor)
        self.get_workplace(workplace_id)
        return self.workplace_repo.get_doctors(workplace_id)
