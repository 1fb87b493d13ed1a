from typing import Optional, List
import uuid

from clinic_scheduler.domain.users.models import User
from clinic_scheduler.domain.workplaces.models import Workplace, DoctorWorkplace


class WorkplaceRepository:
    """Repository for workplace data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, workplace_data: dict) -> Workplace:
        """Create a new workplace"""
        workplace = Workplace(**workplace_data)
        self.db.add(workplace)
        self.db.flush()
        return workplace

    def get_by_id(self, workplace_id: uuid.UUID) -> Optional[Workplace]:
        return self.db.query(Workplace).filter(Workplace.id == workplace_id).first()

    def get_by_name(self, name: str) -> Optional[Workplace]:
        return self.db.query(Workplace).filter(Workplace.name == name).first()

    def get_all(self, active_only: bool = False) -> List[Workplace]:
        query = self.db.query(Workplace)
        if active_only:
            query = query.filter(Workplace.is_active == True)  # noqa: E712
        return query.order_by(Workplace.name.asc()).all()

    def update(self, workplace: Workplace, update_data: dict) -> Workplace:
        for key, value in update_data.items():
            if hasattr(workplace, key):
                setattr(workplace, key, value)
        self.db.flush()
        return workplace

    def delete(self, workplace: Workplace) -> None:
        self.db.delete(workplace)
        self.db.flush()

    # Doctor assignments

    def get_assignment(self, workplace_id: uuid.UUID, doctor_id: uuid.UUID) -> Optional[DoctorWorkplace]:
        return self.db.query(DoctorWorkplace).filter(
            DoctorWorkplace.workplace_id == workplace_id,
            DoctorWorkplace.doctor_id == doctor_id
        ).first()

    def add_assignment(self, workplace_id: uuid.UUID, doctor_id: uuid.UUID) -> DoctorWorkplace:
        link = DoctorWorkplace(workplace_id=workplace_id, doctor_id=doctor_id)
        self.db.add(link)
        self.db.flush()
        return link

    def remove_assignment(self, link: DoctorWorkplace) -> None:
        self.db.delete(link)
        self.db.flush()

    def get_doctors(self, workplace_id: uuid.UUID) -> List[User]:
        """Doctors assigned to a workplace, by last name"""
        return self.db.query(User).join(
            DoctorWorkplace, DoctorWorkplace.doctor_id == User.id
        ).filter(
            DoctorWorkplace.workplace_id == workplace_id
        ).order_by(User.last_name.asc(), User.email.asc()).all()
