# core/context.py
from dataclasses import dataclass
from typing import Optional
from core.errors import ErrorKind, ReadloomError

@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved for one request."""
    id: str
    email: str
    name: Optional[str]
    points: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> "CurrentUser":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            points=user.points,
            is_admin=user.is_admin
        )

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def can_manage(self, owner_id: str) -> bool:
        """Owners and admins may change a resource"""
        return self.is_admin or self.id == owner_id

@dataclass(frozen=True)
class RequestContext:
    """Request-scoped identity, built fresh from the store for every request."""
    user: Optional[CurrentUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> CurrentUser:
        if self.user is None:
            raise ReadloomError(ErrorKind.UNAUTHENTICATED, "Authentication required")
        return self.user

    def require_admin(self) -> CurrentUser:
        user = self.require_user()
        if not user.is_admin:
            raise ReadloomError(ErrorKind.FORBIDDEN, "Admin access required")
        return user
