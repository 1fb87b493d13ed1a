"""
Appointments API Schemas

Pydantic models for appointment requests and responses. Timezone-aware
datetimes are accepted and stored as naive UTC.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date
import uuid
from clinic_scheduler.domain.appointments.models import AppointmentStatus, RecurrenceRule
from clinic_scheduler.domain.users.models import UserRole


class UserSummary(BaseModel):
    """Participant shown inside an appointment"""
    id: uuid.UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str
    role: UserRole

    class Config:
        from_attributes = True


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""
    patient_id: uuid.UUID
    doctor_id: uuid.UUID
    workplace_id: Optional[uuid.UUID] = None
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = Field(None, max_length=2000)
    # Plain string so an unknown rule reaches the service and fails with 400
    recurrence_rule: Optional[str] = Field(None, description="daily, weekly or monthly")
    recurrence_end_date: Optional[date] = None


class AppointmentUpdate(BaseModel):
    """Schema for a partial appointment update"""
    patient_id: Optional[uuid.UUID] = None
    doctor_id: Optional[uuid.UUID] = None
    workplace_id: Optional[uuid.UUID] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[str] = Field(None, description="scheduled, cancelled or completed")
    notes: Optional[str] = Field(None, max_length=2000)


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""
    id: uuid.UUID
    patient_id: uuid.UUID
    doctor_id: uuid.UUID
    workplace_id: Optional[uuid.UUID] = None
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    notes: Optional[str] = None
    recurrence_rule: Optional[RecurrenceRule] = None
    recurrence_end_date: Optional[date] = None
    parent_appointment_id: Optional[uuid.UUID] = None
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
