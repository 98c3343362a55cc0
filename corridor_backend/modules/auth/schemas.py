"""Authentication schemas."""

import enum

from pydantic import BaseModel


class ActorRole(str, enum.Enum):
    """Roles carried in access tokens."""

    STUDENT = "student"
    LANDLORD = "landlord"
    ADMIN = "admin"


class AuthenticatedUser(BaseModel):
    """Caller identity decoded from the bearer token."""

    id: int
    role: ActorRole
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN
