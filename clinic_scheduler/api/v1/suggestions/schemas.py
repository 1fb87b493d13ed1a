from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid
from clinic_scheduler.domain.suggestions.models import SuggestionStatus


class SuggestionCreate(BaseModel):
    """A doctor's proposal; the doctor is the caller"""
    patient_id: uuid.UUID
    workplace_id: Optional[uuid.UUID] = None
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = Field(None, max_length=2000)


class SuggestionDecision(BaseModel):
    status: str = Field(..., description="approved or rejected")


class SuggestionResponse(BaseModel):
    id: uuid.UUID
    doctor_id: uuid.UUID
    patient_id: uuid.UUID
    workplace_id: Optional[uuid.UUID] = None
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None
    status: SuggestionStatus
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[uuid.UUID] = None
    appointment_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
