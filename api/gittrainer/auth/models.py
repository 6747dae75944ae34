"""Database models for authentication.

Cassandra table definitions for the users table and its lookup indexes.
Uses cassandra-driver directly (not an ORM); tables are created via the CQL
statements below during database initialization.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from gittrainer.auth.permissions import UserRole


USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    email TEXT,
    username TEXT,
    password_hash TEXT,
    role TEXT,
    is_active BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

USER_EMAIL_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS users_email_idx ON {keyspace}.users (email)
"""

USER_USERNAME_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS users_username_idx ON {keyspace}.users (username)
"""

# All CQL statements for table setup
AUTH_TABLES_CQL = [
    USER_TABLE_CQL,
    USER_EMAIL_INDEX_CQL,
    USER_USERNAME_INDEX_CQL,
]


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class User:
    """User entity for authentication and authorization.

    Attributes:
        id: Unique identifier (UUID)
        email: Unique email address, stored lower-cased
        username: Unique display name, stored lower-cased
        password_hash: Argon2id hashed password
        role: User role (student, lecturer, admin)
        is_active: Account status
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: UUID | None = None,
        email: str = "",
        username: str = "",
        password_hash: str = "",
        role: str = UserRole.STUDENT.value,
        is_active: bool = True,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.email = email.lower().strip()
        self.username = username.lower().strip()
        self.password_hash = password_hash
        self.role = role
        self.is_active = is_active
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "User":
        """Create User instance from Cassandra row."""
        return cls(
            id=row.id,
            email=row.email,
            username=row.username,
            password_hash=row.password_hash,
            role=row.role,
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self, include_password: bool = False) -> dict[str, Any]:
        """Convert to dictionary (excludes password_hash by default)."""
        data = {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_password:
            data["password_hash"] = self.password_hash
        return data

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role})>"
