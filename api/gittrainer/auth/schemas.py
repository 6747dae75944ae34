"""Pydantic schemas for authentication.

Request and response models for:
- User registration and login
- User profile
- Admin user and role management
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from gittrainer.auth.permissions import SELF_ASSIGNABLE_ROLES, UserRole
from gittrainer.auth.validators import validate_password, validate_username


if TYPE_CHECKING:
    from gittrainer.auth.models import User


def _check_username(v: str) -> str:
    result = validate_username(v)
    if not result.valid:
        msg = result.message or "Invalid username"
        raise ValueError(msg)
    return result.formatted or v


def _check_password(v: str) -> str:
    result = validate_password(v)
    if not result.valid:
        msg = result.message or "Invalid password"
        raise ValueError(msg)
    return v


# ==============================================================================
# Request Schemas
# ==============================================================================


class RegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., description="Unique username")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=8, description="Password")
    role: UserRole = Field(default=UserRole.STUDENT, description="Requested role")

    @field_validator("username")
    @classmethod
    def validate_username_format(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("role")
    @classmethod
    def validate_self_assignable(cls, v: UserRole) -> UserRole:
        if v not in SELF_ASSIGNABLE_ROLES:
            msg = f"Role '{v.value}' cannot be chosen at registration"
            raise ValueError(msg)
        return v


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class UpdateProfileRequest(BaseModel):
    """Profile update request. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(None)
    email: EmailStr | None = Field(None)
    password: str | None = Field(None, min_length=8)

    @field_validator("username")
    @classmethod
    def validate_username_format(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _check_username(v)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _check_password(v)


class UpdateRoleRequest(BaseModel):
    """Admin role change request."""

    role: UserRole = Field(..., description="New role")


# ==============================================================================
# Response Schemas
# ==============================================================================


class UserResponse(BaseModel):
    """User response (public profile)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user: "User") -> "UserResponse":
        """Create response from User model."""
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(BaseModel):
    """Token plus the authenticated user."""

    message: str | None = None
    token: str
    token_type: str = "Bearer"
    user: UserResponse


class UserMessageResponse(BaseModel):
    """Message plus the affected user."""

    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
