from typing import Optional, List
import uuid

from clinic_scheduler.domain.users.models import User, UserRole


class UserRepository:
    """Repository for user data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, user_data: dict) -> User:
        """Create a new user"""
        user = User(**user_data)
        self.db.add(user)
        self.db.flush()
        return user

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self.db.query(User).filter(User.email == email).first()

    def get_all(self, role: Optional[UserRole] = None) -> List[User]:
        """Get users, optionally filtered by role"""
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc()).all()

    def get_by_roles(self, roles) -> List[User]:
        """Get all users holding any of the given roles"""
        return self.db.query(User).filter(User.role.in_(list(roles))).all()

    def lock(self, user_id: uuid.UUID) -> Optional[User]:
        """Take a row lock on a user for the rest of the transaction.

        Serialises concurrent bookings against the same owner on backends
        that support SELECT ... FOR UPDATE; SQLite ignores the clause.
        """
        return self.db.query(User).filter(User.id == user_id).with_for_update().first()

    def update(self, user: User, update_data: dict) -> User:
        """Apply a partial update"""
        for key, value in update_data.items():
            if hasattr(user, key) and value is not None:
                setattr(user, key, value)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        """Delete a user"""
        self.db.delete(user)
        self.db.flush()
