"""
Appointments Repository Layer

Provides data access operations for appointments. Writes are flushed, not
committed; the service decides where the transaction ends.
"""

from typing import Optional, List
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import joinedload
import uuid

from clinic_scheduler.domain.appointments.models import Appointment, AppointmentStatus


class AppointmentRepository:
    """Repository for appointment data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, appointment_data: dict) -> Appointment:
        """Create a new appointment"""
        appointment = Appointment(**appointment_data)
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def get_by_id(self, appointment_id: uuid.UUID) -> Optional[Appointment]:
        """Get appointment by ID with relationships"""
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor),
            joinedload(Appointment.workplace)
        ).filter(Appointment.id == appointment_id).first()

    def get_all(
        self,
        patient_id: Optional[uuid.UUID] = None,
        doctor_id: Optional[uuid.UUID] = None,
        status: Optional[AppointmentStatus] = None,
        start_from: Optional[datetime] = None,
        start_to: Optional[datetime] = None
    ) -> List[Appointment]:
        """Get appointments with filtering, ordered by start time"""
        query = self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor)
        )

        if patient_id:
            query = query.filter(Appointment.patient_id == patient_id)
        if doctor_id:
            query = query.filter(Appointment.doctor_id == doctor_id)
        if status:
            query = query.filter(Appointment.status == status)
        if start_from:
            query = query.filter(Appointment.start_time >= start_from)
        if start_to:
            query = query.filter(Appointment.start_time <= start_to)

        return query.order_by(Appointment.start_time.asc()).all()

    def get_children(self, parent_id: uuid.UUID) -> List[Appointment]:
        """Get the generated occurrences of a recurring appointment"""
        return self.db.query(Appointment).filter(
            Appointment.parent_appointment_id == parent_id
        ).order_by(Appointment.start_time.asc()).all()

    def get_upcoming(
        self,
        window_start: datetime,
        window_end: datetime,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED
    ) -> List[Appointment]:
        """Get appointments starting inside a time window"""
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor)
        ).filter(
            Appointment.start_time >= window_start,
            Appointment.start_time <= window_end,
            Appointment.status == status
        ).order_by(Appointment.start_time.asc()).all()

    def count_for_workplace(self, workplace_id: uuid.UUID) -> int:
        """Count appointments referencing a workplace"""
        return self.db.query(func.count(Appointment.id)).filter(
            Appointment.workplace_id == workplace_id
        ).scalar()

    def update(self, appointment: Appointment, update_data: dict) -> Appointment:
        """Apply a partial update to a loaded appointment"""
        for key, value in update_data.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        self.db.flush()
        return appointment

    def delete(self, appointment: Appointment) -> None:
        """Physically delete an appointment"""
        self.db.delete(appointment)
        self.db.flush()
