"""
Medical Record Models

One clinical record per appointment: diagnosis, treatment and the doctor's
recommendations, written by the appointment's doctor or an administrator.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.infrastructure.database import Base
import uuid


class MedicalRecord(Base):
    """Outcome of an appointment"""
    __tablename__ = "medical_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        Uuid, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    patient_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))

    diagnosis = Column(Text)
    treatment = Column(Text)
    notes = Column(Text)
    recommendations = Column(Text)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    appointment = relationship("Appointment")
    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    author = relationship("User", foreign_keys=[created_by])
