"""
Users API Routes

User administration. Everything is restricted to privileged users
except reading and editing one's own profile.
"""

from fastapi import APIRouter, Depends, status
from typing import List, Optional
import uuid

from clinic_scheduler.api.deps import get_current_user, get_authorizer
from clinic_scheduler.api.v1.users.schemas import UserResponse, UserUpdate, RoleChange
from clinic_scheduler.domain.users.models import UserRole
from clinic_scheduler.domain.users.service import UserService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[UserRole] = None,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    """List users, optionally by role"""
    return UserService(db, authorizer).list_users(current_user, role)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return UserService(db, authorizer).get_user(user_id, current_user)


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: uuid.UUID,
    update_data: UserUpdate,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return UserService(db, authorizer).update_user(
        user_id, update_data.model_dump(exclude_unset=True), current_user
    )


@router.patch("/{user_id}/role", response_model=UserResponse)
def change_user_role(
    user_id: uuid.UUID,
    role_data: RoleChange,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    return UserService(db, authorizer).change_role(user_id, role_data.role, current_user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: uuid.UUID,
    db=Depends(get_db),
    current_user=Depends(get_current_user),
    authorizer=Depends(get_authorizer)
):
    UserService(db, authorizer).delete_user(user_id, current_user)
