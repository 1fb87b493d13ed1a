from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid


class WorkplaceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    equipment: Optional[str] = None


class WorkplaceCreate(WorkplaceBase):
    is_active: bool = True


class WorkplaceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    equipment: Optional[str] = None
    is_active: Optional[bool] = None


class WorkplaceResponse(WorkplaceBase):
    id: uuid.UUID
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DoctorAssignment(BaseModel):
    doctor_id: uuid.UUID


class DoctorAssignmentResponse(BaseModel):
    doctor_id: uuid.UUID
    workplace_id: uuid.UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
