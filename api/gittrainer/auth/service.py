"""Authentication service layer.

Business logic for:
- User registration and login
- Access token creation
- Profile updates
- Admin user listing and role management
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from gittrainer.auth.models import User
from gittrainer.auth.permissions import UserRole
from gittrainer.auth.schemas import RegisterRequest, UserResponse
from gittrainer.auth.security import create_access_token, hash_password, verify_password


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class AuthError(Exception):
    """Base authentication error."""

    def __init__(self, message: str, code: str = "auth_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, "invalid_credentials")


class UserExistsError(AuthError):
    """Email or username already taken."""

    def __init__(
        self,
        message: str = "User already exists",
        field: str | None = None,
    ):
        super().__init__(message, "user_exists")
        self.field = field  # "email" or "username"


class UserNotFoundError(AuthError):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, "user_not_found")


class UserInactiveError(AuthError):
    """User account is inactive."""

    def __init__(self, message: str = "Account is inactive"):
        super().__init__(message, "user_inactive")


class InvalidTokenError(AuthError):
    """Invalid or expired token."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, "invalid_token")


class PermissionDeniedError(AuthError):
    """Permission denied for operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "permission_denied")


# ==============================================================================
# Auth Service
# ==============================================================================


class AuthService:
    """Authentication service for user management and token operations."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session.

        Args:
            session: Cassandra driver session (with aexecute support)
            keyspace: Keyspace name for queries
        """
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._get_user_by_email = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE email = ?"
        )
        self._get_user_by_username = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE username = ?"
        )
        self._get_user_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users WHERE id = ?"
        )
        self._list_users = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.users"
        )
        self._insert_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.users
            (id, email, username, password_hash, role, is_active,
             created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_user = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET email = ?, username = ?, updated_at = ?
            WHERE id = ?
        """)
        self._update_user_password = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET password_hash = ?, updated_at = ?
            WHERE id = ?
        """)
        self._update_user_role = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET role = ?, updated_at = ?
            WHERE id = ?
        """)

    # ==========================================================================
    # User Queries
    # ==========================================================================

    async def _one(self, statement, params: list) -> User | None:
        result = await self.session.aexecute(statement, params)
        row = result.one()
        return User.from_row(row) if row else None

    async def get_user_by_email(self, email: str) -> User | None:
        """Find user by email address."""
        return await self._one(self._get_user_by_email, [email.lower().strip()])

    async def get_user_by_username(self, username: str) -> User | None:
        """Find user by username."""
        return await self._one(self._get_user_by_username, [username.lower().strip()])

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""
        return await self._one(self._get_user_by_id, [user_id])

    async def list_users(self) -> list[User]:
        """List every user, sorted by username.

        Full table scan, acceptable for the admin-only listing.
        """
        rows = await self.session.aexecute(self._list_users, [])
        return sorted((User.from_row(row) for row in rows), key=lambda u: u.username)

    # ==========================================================================
    # Registration and Login
    # ==========================================================================

    async def register_user(self, data: RegisterRequest) -> User:
        """Register a new user.

        Raises:
            UserExistsError: If email or username already exists
        """
        if await self.get_user_by_email(data.email):
            raise UserExistsError("Email already registered", field="email")

        if await self.get_user_by_username(data.username):
            raise UserExistsError("Username already taken", field="username")

        user = User(
            email=data.email,
            username=data.username,
            password_hash=hash_password(data.password),
            role=data.role.value,
            is_active=True,
        )

        await self.session.aexecute(
            self._insert_user,
            [
                user.id,
                user.email,
                user.username,
                user.password_hash,
                user.role,
                user.is_active,
                user.created_at,
                user.updated_at,
            ],
        )

        logger.info("user_registered", user_id=str(user.id), role=user.role)
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If email or password is wrong
            UserInactiveError: If user account is inactive
        """
        user = await self.get_user_by_email(email)
        if not user:
            raise InvalidCredentialsError

        is_valid, new_hash = verify_password(password, user.password_hash)
        if not is_valid:
            raise InvalidCredentialsError

        if not user.is_active:
            raise UserInactiveError

        # Rehash when Argon2 parameters changed
        if new_hash:
            await self.session.aexecute(
                self._update_user_password,
                [new_hash, datetime.now(UTC), user.id],
            )
            user.password_hash = new_hash

        return user

    def create_token(self, user: User) -> str:
        """Create an access token for an authenticated user."""
        return create_access_token(
            {
                "sub": str(user.id),
                "email": user.email,
                "username": user.username,
                "role": user.role,
            }
        )

    # ==========================================================================
    # Profile and Role Management
    # ==========================================================================

    async def update_profile(
        self,
        user_id: UUID,
        username: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """Update username, email and/or password.

        Raises:
            UserNotFoundError: If user doesn't exist
            UserExistsError: If the new email or username belongs to someone else
        """
        user = await self.get_user_by_id(user_id)
        if not user:
            raise UserNotFoundError

        if email is not None and email.lower() != user.email:
            if await self.get_user_by_email(email):
                raise UserExistsError("Email already registered", field="email")
            user.email = email.lower().strip()

        if username is not None and username.lower() != user.username:
            if await self.get_user_by_username(username):
                raise UserExistsError("Username already taken", field="username")
            user.username = username.lower().strip()

        user.updated_at = datetime.now(UTC)

        await self.session.aexecute(
            self._update_user,
            [user.email, user.username, user.updated_at, user.id],
        )

        if password is not None:
            user.password_hash = hash_password(password)
            await self.session.aexecute(
                self._update_user_password,
                [user.password_hash, user.updated_at, user.id],
            )

        logger.info("profile_updated", user_id=str(user.id))
        return user

    async def update_user_role(
        self,
        actor_id: UUID,
        user_id: UUID,
        new_role: UserRole,
    ) -> User:
        """Change a user's role (admin only).

        Raises:
            PermissionDeniedError: If the admin targets their own account
            UserNotFoundError: If user doesn't exist
        """
        if actor_id == user_id:
            raise PermissionDeniedError("You cannot change your own role")

        user = await self.get_user_by_id(user_id)
        if not user:
            raise UserNotFoundError

        user.role = new_role.value
        user.updated_at = datetime.now(UTC)

        await self.session.aexecute(
            self._update_user_role,
            [user.role, user.updated_at, user.id],
        )

        logger.info(
            "user_role_updated",
            user_id=str(user.id),
            role=user.role,
            changed_by=str(actor_id),
        )
        return user

    def to_response(self, user: User) -> UserResponse:
        """Convert User model to UserResponse schema."""
        return UserResponse.from_user(user)
