"""
Appointment Suggestion Models

A doctor proposes a time slot for a patient; an administrator approves
(which books the appointment) or rejects it.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Text, Enum, CheckConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.infrastructure.database import Base
import uuid
import enum


class SuggestionStatus(str, enum.Enum):
    """Review state of a suggestion"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AppointmentSuggestion(Base):
    """Doctor-proposed appointment awaiting review"""
    __tablename__ = "appointment_suggestions"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_suggestions_time_order"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    doctor_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    workplace_id = Column(Uuid, ForeignKey("workplaces.id", ondelete="SET NULL"))

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    notes = Column(Text)

    status = Column(Enum(SuggestionStatus), nullable=False, default=SuggestionStatus.PENDING, index=True)

    # Review
    reviewed_at = Column(DateTime)
    reviewed_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))
    appointment_id = Column(Uuid, ForeignKey("appointments.id", ondelete="SET NULL"))

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    doctor = relationship("User", foreign_keys=[doctor_id])
    patient = relationship("User", foreign_keys=[patient_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    appointment = relationship("Appointment")
