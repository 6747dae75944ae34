"""Authentication module.

Users, roles, bearer tokens and the dependencies protecting other routes.
"""

from gittrainer.auth.dependencies import (
    AdminUser,
    AuthServiceDep,
    CurrentUser,
    LecturerUser,
)
from gittrainer.auth.permissions import UserRole, has_permission
from gittrainer.auth.router import router
from gittrainer.auth.service import AuthError, AuthService


__all__ = [
    "AdminUser",
    "AuthError",
    "AuthService",
    "AuthServiceDep",
    "CurrentUser",
    "LecturerUser",
    "UserRole",
    "has_permission",
    "router",
]
