from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Enum, Uuid
from sqlalchemy.sql import func
from clinic_scheduler.infrastructure.database import Base
import uuid
import enum


class NotificationType(str, enum.Enum):
    """Kinds of in-app notifications"""
    APPOINTMENT_CREATED = "appointment_created"
    APPOINTMENT_UPDATED = "appointment_updated"
    APPOINTMENT_CANCELLED = "appointment_cancelled"
    APPOINTMENT_REMINDER = "appointment_reminder"
    SYSTEM = "system"


class Notification(Base):
    """In-app notification addressed to a single user"""
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(NotificationType), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    # Kept after the appointment is deleted; the database nulls it out
    appointment_id = Column(Uuid, ForeignKey("appointments.id", ondelete="SET NULL"), index=True)

    created_at = Column(DateTime, default=func.now())
