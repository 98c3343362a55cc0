"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .jwt_service import decode_access_token
from .schemas import ActorRole, AuthenticatedUser

security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> AuthenticatedUser:
    """Extract and validate the current user from the JWT token.

    No database call is made; identity and role come from the token.
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return AuthenticatedUser(
            id=int(payload["sub"]),
            role=ActorRole(payload["role"]),
            name=payload.get("name"),
        )
    except (KeyError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token payload: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_role(*allowed_roles: str | ActorRole):
    """Dependency factory for role-based access control.

    Usage:
        @router.post("/units")
        async def create_unit(
            current_user: AuthenticatedUser = Depends(require_role(ActorRole.LANDLORD))
        ):
            ...
    """
    roles = {ActorRole(r) for r in allowed_roles}

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: "
                f"{', '.join(sorted(r.value for r in roles))}",
            )
        return current_user

    return role_checker


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
AdminUser = Annotated[AuthenticatedUser, Depends(require_role(ActorRole.ADMIN))]
LandlordUser = Annotated[AuthenticatedUser, Depends(require_role(ActorRole.LANDLORD))]
StudentUser = Annotated[AuthenticatedUser, Depends(require_role(ActorRole.STUDENT))]
LandlordOrAdminUser = Annotated[
    AuthenticatedUser, Depends(require_role(ActorRole.LANDLORD, ActorRole.ADMIN))
]
