from pydantic import BaseModel, Field
from typing import Optional

from clinic_scheduler.api.v1.auth.schemas import UserResponse
from clinic_scheduler.domain.users.models import UserRole


class UserUpdate(BaseModel):
    """Profile fields; is_active is honoured for administrators only"""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class RoleChange(BaseModel):
    role: UserRole


__all__ = ["UserResponse", "UserUpdate", "RoleChange"]
