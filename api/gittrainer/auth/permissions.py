"""Role-based access control for gittrainer.

Hierarchical roles:
- ADMIN (level 2): Manages users and roles, edits any tutorial
- LECTURER (level 1): Authors tutorials
- STUDENT (level 0): Works through training modules
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles, higher level means more permissions."""

    STUDENT = "student"
    LECTURER = "lecturer"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.STUDENT: 0,
    UserRole.LECTURER: 1,
    UserRole.ADMIN: 2,
}

# Roles a visitor may pick when registering
SELF_ASSIGNABLE_ROLES = frozenset({UserRole.STUDENT, UserRole.LECTURER})


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role, 0 for unknown roles."""
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.LECTURER)
        True
        >>> has_permission("student", "lecturer")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    return get_role_level(role) == ROLE_HIERARCHY[UserRole.ADMIN]


def is_at_least_lecturer(role: UserRole | str) -> bool:
    """Check if role is LECTURER or higher."""
    return has_permission(role, UserRole.LECTURER)
