"""
Workplaces API Routes

Rooms and cabinets, and which doctors are assigned to them.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import uuid

from clinic_scheduler.api.deps import get_current_user, get_authorizer
from clinic_scheduler.api.v1.auth.schemas import UserResponse
from clinic_scheduler.api.v1.workplaces.schemas import (
    WorkplaceCreate, WorkplaceUpdate, WorkplaceResponse,
    DoctorAssignment, DoctorAssignmentResponse
)
from clinic_scheduler.domain.workplaces.service import WorkplaceService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/workplaces", tags=["Workplaces"])


@router.post("", response_model=WorkplaceResponse, status_code=status.HTTP_201_CREATED)
def create_workplace(
    workplace_data: WorkplaceCreate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return WorkplaceService(db, authorizer).create_workplace(workplace_data.model_dump(), current_user)


@router.get("", response_model=List[WorkplaceResponse])
def list_workplaces(
    active_only: bool = False,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return WorkplaceService(db, authorizer).list_workplaces(current_user, active_only)


@router.get("/{workplace_id}", response_model=WorkplaceResponse)
def get_workplace(
    workplace_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return WorkplaceService(db, authorizer).get_workplace(workplace_id, current_user)


@router.patch("/{workplace_id}", response_model=WorkplaceResponse)
def update_workplace(
    workplace_id: uuid.UUID,
    update_data: WorkplaceUpdate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return WorkplaceService(db, authorizer).update_workplace(
        workplace_id, update_data.model_dump(exclude_unset=True), current_user
    )


@router.delete("/{workplace_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workplace(
    workplace_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    WorkplaceService(db, authorizer).delete_workplace(workplace_id, current_user)


@router.get("/{workplace_id}/doctors", response_model=List[UserResponse])
def list_workplace_doctors(
    workplace_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return WorkplaceService(db, authorizer).list_doctors(workplace_id, current_user)


@router.post(
    "/{workplace_id}/doctors",
    response_model=DoctorAssignmentResponse,
    status_code=status.HTTP_201_CREATED
)
def assign_doctor(
    workplace_id: uuid.UUID,
    assignment: DoctorAssignment,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return WorkplaceService(db, authorizer).assign_doctor(workplace_id, assignment.doctor_id, current_user)


@router.delete("/{workplace_id}/doctors/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_doctor(
    workplace_id: uuid.UUID,
    doctor_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    WorkplaceService(db, authorizer).unassign_doctor(workplace_id, doctor_id, current_user)
