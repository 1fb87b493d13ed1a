"""
Appointments Domain Models

Implements the database model for patient-doctor appointments,
including recurring series (children point back at their parent).
"""

from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Text, Enum, CheckConstraint, Index, Uuid
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.infrastructure.database import Base
import uuid
import enum


class AppointmentStatus(str, enum.Enum):
    """Appointment status enumeration"""
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RecurrenceRule(str, enum.Enum):
    """How often a recurring appointment repeats"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Appointment(Base):
    """Appointment model for patient-doctor appointments"""
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_appointments_time_order"),
        Index("ix_appointments_doctor_time", "doctor_id", "start_time", "end_time"),
        Index("ix_appointments_patient_time", "patient_id", "start_time", "end_time"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Patient, doctor and room
    patient_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    doctor_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    workplace_id = Column(Uuid, ForeignKey("workplaces.id", ondelete="SET NULL"))

    # Scheduling, half-open [start_time, end_time)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    status = Column(Enum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED)
    notes = Column(Text)

    # Recurrence
    recurrence_rule = Column(Enum(RecurrenceRule))
    recurrence_end_date = Column(Date)
    parent_appointment_id = Column(Uuid, ForeignKey("appointments.id", ondelete="SET NULL"), index=True)

    # Audit
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    workplace = relationship("Workplace")
    parent = relationship("Appointment", remote_side=[id])
