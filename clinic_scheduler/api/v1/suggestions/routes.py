"""
Appointment Suggestions API Routes

Doctors propose appointments; administrators approve or reject them.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import uuid

from clinic_scheduler.api.deps import get_current_user, get_authorizer
from clinic_scheduler.api.v1.suggestions.schemas import (
    SuggestionCreate, SuggestionDecision, SuggestionResponse
)
from clinic_scheduler.domain.suggestions.service import SuggestionService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/appointment-suggestions", tags=["Appointment Suggestions"])


@router.post("", response_model=SuggestionResponse, status_code=status.HTTP_201_CREATED)
def create_suggestion(
    suggestion_data: SuggestionCreate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return SuggestionService(db, authorizer).create_suggestion(
        patient_id=suggestion_data.patient_id,
        start_time=suggestion_data.start_time,
        end_time=suggestion_data.end_time,
        doctor=current_user,
        notes=suggestion_data.notes,
        workplace_id=suggestion_data.workplace_id
    )


@router.get("", response_model=List[SuggestionResponse])
def list_suggestions(
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Own suggestions for doctors, all suggestions for administrators"""
    return SuggestionService(db, authorizer).list_suggestions(current_user)


@router.get("/{suggestion_id}", response_model=SuggestionResponse)
def get_suggestion(
    suggestion_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return SuggestionService(db, authorizer).get_suggestion(suggestion_id, current_user)


@router.patch("/{suggestion_id}", response_model=SuggestionResponse)
def decide_suggestion(
    suggestion_id: uuid.UUID,
    decision: SuggestionDecision,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """Approve (books the appointment) or reject a pending suggestion"""
    return SuggestionService(db, authorizer).decide(suggestion_id, decision.status, current_user)
