"""
Medical Records API Routes

One record per appointment, written by its doctor or an administrator.
"""

from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
import uuid

from clinic_scheduler.api.deps import get_current_user, get_authorizer
from clinic_scheduler.api.v1.medical_records.schemas import (
    MedicalRecordCreate, MedicalRecordUpdate, MedicalRecordResponse
)
from clinic_scheduler.domain.medical_records.service import MedicalRecordService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/medical-records", tags=["Medical Records"])


@router.post("", response_model=MedicalRecordResponse, status_code=status.HTTP_201_CREATED)
def create_medical_record(
    record_data: MedicalRecordCreate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return MedicalRecordService(db, authorizer).create_record(
        appointment_id=record_data.appointment_id,
        patient_id=record_data.patient_id,
        doctor_id=record_data.doctor_id,
        author=current_user,
        diagnosis=record_data.diagnosis,
        treatment=record_data.treatment,
        notes=record_data.notes,
        recommendations=record_data.recommendations
    )


@router.get("", response_model=List[MedicalRecordResponse])
def list_medical_records(
    patient_id: Optional[uuid.UUID] = Query(None),
    doctor_id: Optional[uuid.UUID] = Query(None),
    appointment_id: Optional[uuid.UUID] = Query(None),
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Records the caller takes part in, newest first"""
    return MedicalRecordService(db, authorizer).list_records(
        current_user, patient_id=patient_id, doctor_id=doctor_id, appointment_id=appointment_id
    )


@router.get("/{record_id}", response_model=MedicalRecordResponse)
def get_medical_record(
    record_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return MedicalRecordService(db, authorizer).get_record(record_id, current_user)


@router.patch("/{record_id}", response_model=MedicalRecordResponse)
def update_medical_record(
    record_id: uuid.UUID,
    update_data: MedicalRecordUpdate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return MedicalRecordService(db, authorizer).update_record(
        record_id, update_data.model_dump(exclude_unset=True), current_user
    )


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medical_record(
    record_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    MedicalRecordService(db, authorizer).delete_record(record_id, current_user)
