"""
Appointments API Routes

API endpoints for booking, listing, changing and removing appointments.
"""

from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from datetime import datetime
import uuid

from clinic_scheduler.api.deps import get_current_user, get_authorizer
from clinic_scheduler.api.v1.appointments.schemas import (
    AppointmentCreate, AppointmentUpdate, AppointmentResponse
)
from clinic_scheduler.domain.appointments.service import AppointmentService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_data: AppointmentCreate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Book an appointment, expanding it when a recurrence is given"""
    service = AppointmentService(db, authorizer)
    return service.create_appointment(
        patient_id=appointment_data.patient_id,
        doctor_id=appointment_data.doctor_id,
        start_time=appointment_data.start_time,
        end_time=appointment_data.end_time,
        actor=current_user,
        notes=appointment_data.notes,
        workplace_id=appointment_data.workplace_id,
        recurrence_rule=appointment_data.recurrence_rule,
        recurrence_end_date=appointment_data.recurrence_end_date
    )


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    start_date: Optional[datetime] = Query(None, description="Earliest start time, inclusive"),
    end_date: Optional[datetime] = Query(None, description="Latest start time, inclusive"),
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """List appointments ordered by start time"""
    service = AppointmentService(db, authorizer)
    if start_date and end_date:
        return service.find_by_date_range(start_date, end_date, current_user)
    return service.list_appointments(current_user, start_date, end_date)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return AppointmentService(db, authorizer).get_appointment(appointment_id, current_user)


@router.get("/{appointment_id}/occurrences", response_model=List[AppointmentResponse])
def get_appointment_occurrences(
    appointment_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Occurrences generated from a recurring appointment"""
    return AppointmentService(db, authorizer).get_occurrences(appointment_id, current_user)


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: uuid.UUID,
    update_data: AppointmentUpdate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Partially update an appointment"""
    return AppointmentService(db, authorizer).update_appointment(
        appointment_id, update_data.model_dump(exclude_unset=True), current_user
    )


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Delete an appointment and notify its participants"""
    AppointmentService(db, authorizer).remove_appointment(appointment_id, current_user)
