"""
Auth API Routes

Registration, login and the current user's profile.
"""

from fastapi import APIRouter, Depends, status

from clinic_scheduler.api.deps import get_current_user
from clinic_scheduler.api.v1.auth.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse
)
from clinic_scheduler.domain.users.service import AuthService
from clinic_scheduler.infrastructure.database import get_db

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    db=Depends(get_db)
):
    """Create a patient account and return an access token"""
    user, token = AuthService(db).register(
        email=register_data.email,
        password=register_data.password,
        first_name=register_data.first_name,
        last_name=register_data.last_name,
        phone=register_data.phone
    )
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login(
    login_data: LoginRequest,
    db=Depends(get_db)
):
    """Authenticate user and return a token"""
    user, token = AuthService(db).login(login_data.email, login_data.password)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user=Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return current_user
