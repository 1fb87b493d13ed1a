"""
Users Domain Models

A single user table holds patients, doctors and administrative staff;
the role column distinguishes them.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Enum, Uuid
from sqlalchemy.sql import func
from clinic_scheduler.infrastructure.database import Base
import uuid
import enum


class UserRole(str, enum.Enum):
    """User roles in the clinic"""
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"
    ROOT_USER = "root_user"
    DEVELOPER = "developer"


class User(Base):
    """User model for authentication and authorization"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Profile information
    first_name = Column(String(100))
    last_name = Column(String(100))
    phone = Column(String(20))

    role = Column(Enum(UserRole), nullable=False, default=UserRole.PATIENT, index=True)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        """Display name, falling back to the email address"""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email
