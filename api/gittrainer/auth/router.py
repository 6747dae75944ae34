"""Authentication API endpoints.

Provides routes for:
- User registration and login
- Profile read and update
- Admin user listing and role management
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from gittrainer.auth.dependencies import (
    AdminUser,
    AuthServiceDep,
    CurrentUser,
    handle_auth_error,
)
from gittrainer.auth.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UpdateRoleRequest,
    UserMessageResponse,
    UserResponse,
)
from gittrainer.auth.service import AuthError


router = APIRouter(prefix="/api/auth", tags=["auth"])


# ==============================================================================
# Registration and Login
# ==============================================================================


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    responses={
        400: {"description": "Validation error"},
        409: {"description": "Email or username already exists"},
    },
)
async def register(
    data: RegisterRequest,
    auth_service: AuthServiceDep,
) -> AuthResponse:
    """Register a new account and log it in.

    Students and lecturers can sign up on their own; admins are promoted by
    another admin.
    """
    try:
        user = await auth_service.register_user(data)
    except AuthError as e:
        raise handle_auth_error(e) from e

    return AuthResponse(
        message="User created successfully",
        token=auth_service.create_token(user),
        user=auth_service.to_response(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="User login",
    responses={
        401: {"description": "Invalid credentials"},
        403: {"description": "Account inactive"},
    },
)
async def login(
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> AuthResponse:
    """Authenticate user and return a bearer access token."""
    try:
        user = await auth_service.authenticate_user(data.email, data.password)
    except AuthError as e:
        raise handle_auth_error(e) from e

    return AuthResponse(
        token=auth_service.create_token(user),
        user=auth_service.to_response(user),
    )


# ==============================================================================
# Profile
# ==============================================================================


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get current user",
)
async def get_profile(
    user: CurrentUser,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Get the current user's profile from the database."""
    db_user = await auth_service.get_user_by_id(user.id)
    if not db_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return auth_service.to_response(db_user)


@router.patch(
    "/profile",
    response_model=UserMessageResponse,
    summary="Update current user profile",
    responses={
        400: {"description": "Unknown or invalid fields"},
        409: {"description": "Email or username already exists"},
    },
)
async def update_profile(
    data: UpdateProfileRequest,
    user: CurrentUser,
    auth_service: AuthServiceDep,
) -> UserMessageResponse:
    """Update username, email and/or password."""
    try:
        updated = await auth_service.update_profile(
            user_id=user.id,
            username=data.username,
            email=data.email,
            password=data.password,
        )
    except AuthError as e:
        raise handle_auth_error(e) from e

    return UserMessageResponse(
        message="Profile updated successfully",
        user=auth_service.to_response(updated),
    )


# ==============================================================================
# Admin
# ==============================================================================


@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="List users (admin only)",
)
async def list_users(
    admin: AdminUser,
    auth_service: AuthServiceDep,
) -> list[UserResponse]:
    """List every user, sorted by username."""
    users = await auth_service.list_users()
    return [auth_service.to_response(u) for u in users]


@router.patch(
    "/users/{user_id}/role",
    response_model=UserMessageResponse,
    summary="Update user role (admin only)",
    responses={
        403: {"description": "Permission denied"},
        404: {"description": "User not found"},
    },
)
async def update_user_role(
    user_id: UUID,
    data: UpdateRoleRequest,
    admin: AdminUser,
    auth_service: AuthServiceDep,
) -> UserMessageResponse:
    """Change another user's role. Admins cannot change their own role."""
    try:
        updated = await auth_service.update_user_role(admin.id, user_id, data.role)
    except AuthError as e:
        raise handle_auth_error(e) from e

    return UserMessageResponse(
        message="User role updated successfully",
        user=auth_service.to_response(updated),
    )
