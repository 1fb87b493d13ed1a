"""
Medical Records Service Layer

A record documents the outcome of one appointment. Only the appointment's
doctor or an administrator may write it; its patient may read it.
"""

from typing import Optional, List
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from clinic_scheduler.core.exceptions import (
    AuthorizationError, BadRequestError, NotFoundError
)
from clinic_scheduler.core.permissions import Authorizer, default_authorizer
from clinic_scheduler.domain.appointments.repository import AppointmentRepository
from clinic_scheduler.domain.medical_records.models import MedicalRecord
from clinic_scheduler.domain.medical_records.repository import MedicalRecordRepository
from clinic_scheduler.domain.users.models import User

logger = logging.getLogger(__name__)

CLINICAL_FIELDS = ("diagnosis", "treatment", "notes", "recommendations")


class MedicalRecordService:
    """Service layer for medical record management"""

    def __init__(self, db, authorizer: Authorizer = default_authorizer):
        self.db = db
        self.authorizer = authorizer
        self.record_repo = MedicalRecordRepository(db)
        self.appointment_repo = AppointmentRepository(db)

    def _load(self, record_id: uuid.UUID) -> MedicalRecord:
        record = self.record_repo.get_by_id(record_id)
        if not record:
            raise NotFoundError(f"Medical record with ID {record_id} not found")
        return record

    def create_record(
        self,
        appointment_id: uuid.UUID,
        patient_id: uuid.UUID,
        doctor_id: uuid.UUID,
        author: User,
        diagnosis: Optional[str] = None,
        treatment: Optional[str] = None,
        notes: Optional[str] = None,
        recommendations: Optional[str] = None
    ) -> MedicalRecord:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment with ID {appointment_id} not found")
        if not self.authorizer.can_write_medical_record(author, appointment):
            raise AuthorizationError("Only the appointment's doctor may write its medical record")

        if self.record_repo.get_by_appointment(appointment_id):
            raise BadRequestError(
                "A medical record already exists for this appointment",
                details={"appointment_id": str(appointment_id)}
            )
        if appointment.patient_id != patient_id or appointment.doctor_id != doctor_id:
            raise BadRequestError("Patient or doctor does not match the appointment")

        try:
            record = self.record_repo.create({
                "appointment_id": appointment_id,
                "patient_id": patient_id,
                "doctor_id": doctor_id,
                "created_by": author.id,
                "diagnosis": diagnosis,
                "treatment": treatment,
                "notes": notes,
                "recommendations": recommendations,
            })
            self.db.commit()
        except IntegrityError:
            # Lost the race on the unique appointment_id
            self.db.rollback()
            raise BadRequestError("A medical record already exists for this appointment")

        logger.info(f"Medical record {record.id} created for appointment {appointment_id} by {author.id}")
        return self._load(record.id)

    def list_records(
        self,
        user: User,
        patient_id: Optional[uuid.UUID] = None,
        doctor_id: Optional[uuid.UUID] = None,
        appointment_id: Optional[uuid.UUID] = None
    ) -> List[MedicalRecord]:
        """Records the user takes part in; administrators see all. Filters narrow further."""
        visible_to = None if self.authorizer.is_privileged(user) else user.id
        return self.record_repo.get_all(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_id=appointment_id,
            visible_to=visible_to
        )

    def get_record(self, record_id: uuid.UUID, user: User) -> MedicalRecord:
        record = self._load(record_id)
        if not self.authorizer.can_view_medical_record(user, record):
            raise AuthorizationError("Not authorized to view this medical record")
        return record

    def update_record(self, record_id: uuid.UUID, update_data: dict, user: User) -> MedicalRecord:
        """Change the clinical text; links to appointment and participants are fixed"""
        record = self._load(record_id)
        if not self.authorizer.can_write_medical_record(user, record):
            raise AuthorizationError("Not authorized to edit this medical record")

        changes = {k: v for k, v in update_data.items() if k in CLINICAL_FIELDS}
        try:
            self.record_repo.update(record, changes)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def delete_record(self, record_id: uuid.UUID, user: User) -> None:
        record = self._load(record_id)
        if not self.authorizer.can_write_medical_record(user, record):
            raise AuthorizationError("Not authorized to delete this medical record")

        self.record_repo.delete(record)
        self.db.commit()
        logger.info(f"Deleted medical record {record_id}")
