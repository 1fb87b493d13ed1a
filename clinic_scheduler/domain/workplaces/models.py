"""
Workplaces Domain Models

Rooms and cabinets where appointments take place, and the doctors
assigned to them.
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, Text, UniqueConstraint, Uuid
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clinic_scheduler.infrastructure.database import Base
import uuid


class Workplace(Base):
    """A bookable room or cabinet"""
    __tablename__ = "workplaces"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), unique=True, nullable=False)
    description = Column(Text)
    type = Column(String(100))
    location = Column(String(255))
    equipment = Column(Text)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    doctor_links = relationship(
        "DoctorWorkplace",
        back_populates="workplace",
        cascade="all, delete-orphan"
    )


class DoctorWorkplace(Base):
    """Assignment of a doctor to a workplace"""
    __tablename__ = "doctor_workplaces"
    __table_args__ = (
        UniqueConstraint("doctor_id", "workplace_id", name="uq_doctor_workplace"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    doctor_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    workplace_id = Column(Uuid, ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=func.now())

    workplace = relationship("Workplace", back_populates="doctor_links")
    doctor = relationship("User")
