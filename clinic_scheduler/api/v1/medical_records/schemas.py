from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid
from clinic_scheduler.api.v1.appointments.schemas import UserSummary
from clinic_scheduler.domain.appointments.models import AppointmentStatus


class AppointmentSummary(BaseModel):
    id: uuid.UUID
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus

    class Config:
        from_attributes = True


class MedicalRecordCreate(BaseModel):
    """Schema for documenting an appointment"""
    appointment_id: uuid.UUID
    patient_id: uuid.UUID
    doctor_id: uuid.UUID
    diagnosis: Optional[str] = Field(None, max_length=5000)
    treatment: Optional[str] = Field(None, max_length=5000)
    notes: Optional[str] = Field(None, max_length=5000)
    recommendations: Optional[str] = Field(None, max_length=5000)


class MedicalRecordUpdate(BaseModel):
    diagnosis: Optional[str] = Field(None, max_length=5000)
    treatment: Optional[str] = Field(None, max_length=5000)
    notes: Optional[str] = Field(None, max_length=5000)
    recommendations: Optional[str] = Field(None, max_length=5000)


class MedicalRecordResponse(BaseModel):
    id: uuid.UUID
    appointment_id: uuid.UUID
    patient_id: uuid.UUID
    doctor_id: uuid.UUID
    created_by: Optional[uuid.UUID] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    recommendations: Optional[str] = None
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
    appointment: Optional[AppointmentSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
