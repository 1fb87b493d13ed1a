"""
Notifications API Routes

The current user's notifications, plus a manual trigger for the
reminder job.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import uuid

from clinic_scheduler.api.deps import get_current_user, get_privileged_user
from clinic_scheduler.api.v1.notifications.schemas import (
    NotificationResponse, MarkReadRequest, UnreadCountResponse,
    UpdatedCountResponse, ReminderCheckResponse
)
from clinic_scheduler.domain.notifications.reminders import ReminderService
from clinic_scheduler.domain.notifications.service import NotificationService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    db=Depends(get_db),
    current_user=Depends(get_current_user)
):
    """Latest notifications, newest first"""
    return NotificationService(db).list_for_user(current_user.id)


@router.get("/unread", response_model=List[NotificationResponse])
def list_unread_notifications(
    db=Depends(get_db),
    current_user=Depends(get_current_user)
):
    return NotificationService(db).list_unread(current_user.id)


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    db=Depends(get_db),
    current_user=Depends(get_current_user)
):
    return UnreadCountResponse(count=NotificationService(db).unread_count(current_user.id))


@router.patch("/mark-read", response_model=UpdatedCountResponse)
def mark_notifications_read(
    request_data: MarkReadRequest,
    db=Depends(get_db),
    current_user=Depends(get_current_user)
):
    updated = NotificationService(db).mark_read(current_user.id, request_data.notification_ids)
    return UpdatedCountResponse(updated=updated)


@router.patch("/mark-all-read", response_model=UpdatedCountResponse)
def mark_all_notifications_read(
    db=Depends(get_db),
    current_user=Depends(get_current_user)
):
    return UpdatedCountResponse(updated=NotificationService(db).mark_all_read(current_user.id))


@router.post("/check-reminders", response_model=ReminderCheckResponse)
def check_reminders(
    db=Depends(get_db),
    current_user=Depends(get_privileged_user)
):
    """Run the reminder job now"""
    return ReminderCheckResponse(reminded=ReminderService(db).check_upcoming_appointments())


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user)
):
    NotificationService(db).delete(notification_id, current_user.id)
