"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current identity extraction from JWT
- Role-based access control
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from src.auth.permissions import UserRole, has_permission
from src.auth.schemas import Identity
from src.auth.security import decode_access_token
from src.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Identity:
    """Resolve the caller's identity from the access token.

    Raises:
        HTTPException(401): If token is missing, invalid, expired or carries
            an unknown role
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        identity = Identity(id=UUID(payload["sub"]), role=UserRole(payload["role"]))
    except (JWTError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    set_user_id(identity.id)
    return identity


def require_role(*allowed_roles: UserRole):
    """Create dependency requiring one of the given roles (exact match)."""

    async def role_checker(
        user: Annotated[Identity, Depends(get_current_user)],
    ) -> Identity:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return role_checker


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level.

    Hierarchical: SUPER_ADMIN >= TRAINER >= TRAINEE
    """

    async def permission_checker(
        user: Annotated[Identity, Depends(get_current_user)],
    ) -> Identity:
        if not has_permission(user.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return permission_checker


# ==============================================================================
# Type Aliases
# ==============================================================================

CurrentUser = Annotated[Identity, Depends(get_current_user)]
TrainerUser = Annotated[Identity, Depends(require_permission(UserRole.TRAINER))]
AdminUser = Annotated[Identity, Depends(require_role(UserRole.SUPER_ADMIN))]
