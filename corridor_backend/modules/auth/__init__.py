"""Authentication module: bearer token verification and role checks."""

from .dependencies import (
    AdminUser,
    CurrentUser,
    LandlordOrAdminUser,
    LandlordUser,
    StudentUser,
    get_current_user,
    require_role,
)
from .schemas import ActorRole, AuthenticatedUser

__all__ = [
    "get_current_user",
    "require_role",
    "CurrentUser",
    "AdminUser",
    "LandlordUser",
    "StudentUser",
    "LandlordOrAdminUser",
    "ActorRole",
    "AuthenticatedUser",
]
