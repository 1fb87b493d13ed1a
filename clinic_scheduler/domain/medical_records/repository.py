from typing import Optional, List
from sqlalchemy.orm import joinedload
import uuid

from clinic_scheduler.domain.medical_records.models import MedicalRecord


class MedicalRecordRepository:
    """Repository for medical record data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, record_data: dict) -> MedicalRecord:
        record = MedicalRecord(**record_data)
        self.db.add(record)
        self.db.flush()
        return record

    def get_by_id(self, record_id: uuid.UUID) -> Optional[MedicalRecord]:
        return self.db.query(MedicalRecord).options(
            joinedload(MedicalRecord.patient),
            joinedload(MedicalRecord.doctor),
            joinedload(MedicalRecord.appointment)
        ).filter(MedicalRecord.id == record_id).first()

    def get_by_appointment(self, appointment_id: uuid.UUID) -> Optional[MedicalRecord]:
        return self.db.query(MedicalRecord).filter(
            MedicalRecord.appointment_id == appointment_id
        ).first()

    def get_all(
        self,
        patient_id: Optional[uuid.UUID] = None,
        doctor_id: Optional[uuid.UUID] = None,
        appointment_id: Optional[uuid.UUID] = None,
        visible_to: Optional[uuid.UUID] = None
    ) -> List[MedicalRecord]:
        """Get records, newest first.

        visible_to limits the result to records where that user is the
        patient or the doctor.
        """
        query = self.db.query(MedicalRecord)
        if visible_to:
            query = query.filter(
                (MedicalRecord.patient_id == visible_to) | (MedicalRecord.doctor_id == visible_to)
            )
        if patient_id:
            query = query.filter(MedicalRecord.patient_id == patient_id)
        if doctor_id:
            query = query.filter(MedicalRecord.doctor_id == doctor_id)
        if appointment_id:
            query = query.filter(MedicalRecord.appointment_id == appointment_id)
        return query.order_by(MedicalRecord.created_at.desc()).all()

    def update(self, record: MedicalRecord, update_data: dict) -> MedicalRecord:
        for key, value in update_data.items():
            if hasattr(record, key):
                setattr(record, key, value)
        self.db.flush()
        return record

    def delete(self, record: MedicalRecord) -> None:
        self.db.delete(record)
        self.db.flush()
