import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clinic_scheduler.core.exceptions import AuthenticationError
from clinic_scheduler.core.permissions import Authorizer, default_authorizer
from clinic_scheduler.core.security import verify_token
from clinic_scheduler.domain.users.models import User
from clinic_scheduler.domain.users.repository import UserRepository
from clinic_scheduler.infrastructure.database import get_db

bearer_scheme = HTTPBearer(auto_error=False)


def get_authorizer() -> Authorizer:
    return default_authorizer


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db=Depends(get_db)
) -> User:
    """Resolve the user from a bearer access token"""
    if credentials is None:
        raise AuthenticationError("Access token is required")

    payload = verify_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid token subject")

    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is inactive")
    return user


def get_privileged_user(
    current_user: User = Depends(get_current_user),
    authorizer: Authorizer = Depends(get_authorizer)
) -> User:
    authorizer.require_privileged(current_user)
    return current_user
