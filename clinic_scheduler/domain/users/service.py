"""
Users Service Layer

Registration, login and user administration.
"""

from typing import Optional, List, Tuple
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from clinic_scheduler.core.exceptions import (
    AuthenticationError, ConflictError, NotFoundError, AuthorizationError
)
from clinic_scheduler.core.permissions import Authorizer, default_authorizer
from clinic_scheduler.core.security import (
    create_access_token, get_password_hash, verify_password
)
from clinic_scheduler.domain.users.models import User, UserRole
from clinic_scheduler.domain.users.repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Service layer for authentication"""

    def __init__(self, db):
        self.db = db
        self.user_repo = UserRepository(db)

    def _issue_token(self, user: User) -> str:
        return create_access_token(
            str(user.id),
            {"email": user.email, "role": user.role.value}
        )

    def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
        role: UserRole = UserRole.PATIENT
    ) -> Tuple[User, str]:
        """Register a new user and return it with an access token"""
        if self.user_repo.get_by_email(email):
            raise ConflictError("A user with this email already exists")

        user = self.user_repo.create({
            "email": email,
            "password_hash": get_password_hash(password),
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "role": role,
            "is_active": True
        })
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Registered user {user.id} with role {user.role.value}")
        return user, self._issue_token(user)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """Authenticate by email and password"""
        user = self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("User account is inactive")
        return user, self._issue_token(user)


class UserService:
    """Service layer for user administration"""

    def __init__(self, db, authorizer: Authorizer = default_authorizer):
        self.db = db
        self.user_repo = UserRepository(db)
        self.authorizer = authorizer

    def list_users(self, actor: User, role: Optional[UserRole] = None) -> List[User]:
        self.authorizer.require_privileged(actor)
        return self.user_repo.get_all(role)

    def get_user(self, user_id: uuid.UUID, actor: User) -> User:
        if actor.id != user_id and not self.authorizer.is_privileged(actor):
            raise AuthorizationError("Not authorized to view this user")
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    def update_user(self, user_id: uuid.UUID, update_data: dict, actor: User) -> User:
        user = self.get_user(user_id, actor)
        allowed = {"first_name", "last_name", "phone"}
        if self.authorizer.is_privileged(actor):
            allowed.add("is_active")
        update_data = {k: v for k, v in update_data.items() if k in allowed}
        user = self.user_repo.update(user, update_data)
        self.db.commit()
        self.db.refresh(user)
        return user

    def change_role(self, user_id: uuid.UUID, role: UserRole, actor: User) -> User:
        self.authorizer.require_privileged(actor, "Only administrators may change roles")
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user_id} role changed to {role.value} by {actor.id}")
        return user

    def delete_user(self, user_id: uuid.UUID, actor: User) -> None:
        self.authorizer.require_privileged(actor, "Only administrators may delete users")
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        try:
            self.user_repo.delete(user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User is still referenced by appointments or suggestions")
