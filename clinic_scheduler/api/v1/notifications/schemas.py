from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
import uuid
from clinic_scheduler.domain.notifications.models import NotificationType


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    read: bool
    appointment_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MarkReadRequest(BaseModel):
    notification_ids: List[uuid.UUID]


class UnreadCountResponse(BaseModel):
    count: int


class UpdatedCountResponse(BaseModel):
    updated: int


class ReminderCheckResponse(BaseModel):
    reminded: int
