"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Auth service
- Current user extraction from JWT
- Role-based access control
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from gittrainer.auth.permissions import UserRole, has_permission
from gittrainer.auth.schemas import UserResponse
from gittrainer.auth.security import decode_access_token
from gittrainer.auth.service import AuthError, AuthService
from gittrainer.core.context import set_user_id


async def get_auth_service(request: Request) -> AuthService:
    """Get auth service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "auth_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Auth service not available",
        )
    return app_state.auth_service


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if not present
    """
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
) -> UserResponse:
    """Get current authenticated user from JWT token.

    The user is rebuilt from the token claims without a database read.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        user_id = payload["sub"]
        user = UserResponse(
            id=user_id,
            email=payload["email"],
            username=payload.get("username", ""),
            role=payload["role"],
            is_active=True,  # Inactive users cannot log in
            created_at=payload["iat"],
        )
    except (JWTError, KeyError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Set user_id in context for logging
    set_user_id(user.id)
    return user


def require_role(*allowed_roles: UserRole):
    """Create dependency requiring specific role(s) (exact match)."""

    async def role_checker(
        user: Annotated[UserResponse, Depends(get_current_user)],
    ) -> UserResponse:
        if user.role not in {role.value for role in allowed_roles}:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return role_checker


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level.

    Uses hierarchical comparison: ADMIN >= LECTURER >= STUDENT
    """

    async def permission_checker(
        user: Annotated[UserResponse, Depends(get_current_user)],
    ) -> UserResponse:
        if not has_permission(user.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return permission_checker


def handle_auth_error(error: AuthError) -> HTTPException:
    """Convert auth errors to HTTP exceptions."""
    status_map = {
        "invalid_credentials": status.HTTP_401_UNAUTHORIZED,
        "invalid_token": status.HTTP_401_UNAUTHORIZED,
        "user_inactive": status.HTTP_403_FORBIDDEN,
        "permission_denied": status.HTTP_403_FORBIDDEN,
        "user_not_found": status.HTTP_404_NOT_FOUND,
        "user_exists": status.HTTP_409_CONFLICT,
    }

    status_code = status_map.get(error.code, status.HTTP_400_BAD_REQUEST)

    # Conflicts name the offending field
    field = getattr(error, "field", None)
    detail: str | dict[str, str] = (
        {"message": error.message, "field": field} if field else error.message
    )

    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(
        status_code=status_code,
        detail=detail,
        headers=headers,
    )


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]

CurrentUser = Annotated[UserResponse, Depends(get_current_user)]
AdminUser = Annotated[UserResponse, Depends(require_role(UserRole.ADMIN))]
LecturerUser = Annotated[UserResponse, Depends(require_permission(UserRole.LECTURER))]
