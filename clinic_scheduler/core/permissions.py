"""
Role-based authorization.

Every service and API dependency asks an Authorizer instead of comparing
role strings itself, so the privileged-role policy lives in one place.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from clinic_scheduler.core.exceptions import AuthorizationError
from clinic_scheduler.domain.users.models import UserRole


PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.ROOT_USER, UserRole.DEVELOPER})


class Authorizer(ABC):
    """Authorization capability consulted by the domain services"""

    @abstractmethod
    def has_role(self, user, *roles: UserRole) -> bool:
        ...

    @abstractmethod
    def is_privileged(self, user) -> bool:
        ...

    @abstractmethod
    def can_view_suggestion(self, user, suggestion) -> bool:
        ...

    @abstractmethod
    def can_view_medical_record(self, user, record) -> bool:
        ...

    @abstractmethod
    def can_write_medical_record(self, user, record) -> bool:
        """record is anything carrying doctor_id: the record itself or its appointment"""
        ...

    @abstractmethod
    def privileged_roles(self) -> Iterable[UserRole]:
        ...

    def require_privileged(self, user, message: str = "Administrator privileges required") -> None:
        if not self.is_privileged(user):
            raise AuthorizationError(message)

    def require_role(self, user, role: UserRole, message: Optional[str] = None) -> None:
        if not self.has_role(user, role):
            raise AuthorizationError(message or f"Only users with role '{role.value}' may do this")

    def require_any(self, user, roles: Iterable[UserRole], message: str = "Insufficient permissions") -> None:
        """Allow privileged users and any of the listed roles"""
        if not (self.is_privileged(user) or self.has_role(user, *roles)):
            raise AuthorizationError(message)


class RoleAuthorizer(Authorizer):
    """Authorizer backed by the user's role column"""

    def __init__(self, privileged: Iterable[UserRole] = PRIVILEGED_ROLES):
        self._privileged = frozenset(privileged)

    def has_role(self, user, *roles: UserRole) -> bool:
        return user is not None and user.role in roles

    def is_privileged(self, user) -> bool:
        return user is not None and user.role in self._privileged

    def can_view_suggestion(self, user, suggestion) -> bool:
        if self.is_privileged(user):
            return True
        return self.has_role(user, UserRole.DOCTOR) and suggestion.doctor_id == user.id

    def can_view_medical_record(self, user, record) -> bool:
        if self.is_privileged(user):
            return True
        return user is not None and user.id in (record.patient_id, record.doctor_id)

    def can_write_medical_record(self, user, record) -> bool:
        if self.is_privileged(user):
            return True
        return user is not None and record.doctor_id == user.id

    def privileged_roles(self) -> Iterable[UserRole]:
        return self._privileged


default_authorizer = RoleAuthorizer()
