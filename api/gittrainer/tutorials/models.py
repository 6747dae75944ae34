"""Database models for lecturer-authored tutorials.

Cassandra table definitions for:
- Tutorials: Main table with embedded exercise descriptors
- Secondary indexes for title uniqueness, author and publication lookups
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class Difficulty(str, Enum):
    """Tutorial and exercise difficulty."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


DEFAULT_EXERCISE_POINTS = 10


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Exercises: list of {title, description, difficulty, points} text maps
TUTORIAL_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.tutorials (
    id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    content TEXT,
    author_id UUID,
    version INT,
    difficulty TEXT,
    tags LIST<TEXT>,
    exercises LIST<FROZEN<MAP<TEXT, TEXT>>>,
    prerequisites LIST<UUID>,
    published BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

TUTORIAL_TITLE_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS tutorials_title_idx ON {keyspace}.tutorials (title)
"""

TUTORIAL_AUTHOR_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS tutorials_author_idx ON {keyspace}.tutorials (author_id)
"""

TUTORIAL_PUBLISHED_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS tutorials_published_idx ON {keyspace}.tutorials (published)
"""

# All CQL statements for table setup
TUTORIALS_TABLES_CQL = [
    TUTORIAL_TABLE_CQL,
    TUTORIAL_TITLE_INDEX_CQL,
    TUTORIAL_AUTHOR_INDEX_CQL,
    TUTORIAL_PUBLISHED_INDEX_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class TutorialExercise:
    """Exercise descriptor embedded in a tutorial."""

    def __init__(
        self,
        title: str,
        description: str,
        difficulty: str = Difficulty.BEGINNER.value,
        points: int = DEFAULT_EXERCISE_POINTS,
    ):
        self.title = title
        self.description = description
        self.difficulty = difficulty
        self.points = points

    @classmethod
    def from_map(cls, data: dict[str, str]) -> "TutorialExercise":
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            difficulty=data.get("difficulty") or Difficulty.BEGINNER.value,
            points=int(data.get("points") or DEFAULT_EXERCISE_POINTS),
        )

    def to_map(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "points": str(self.points),
        }


class Tutorial:
    """Tutorial entity.

    Attributes:
        id: Tutorial UUID
        title: Unique title
        description: Short summary shown in listings
        content: Markdown body
        author_id: UUID of the lecturer/admin who created it
        version: Starts at 1, bumped on every content change
        difficulty: beginner, intermediate or advanced
        tags: Free-form tags
        exercises: Embedded exercise descriptors
        prerequisites: UUIDs of tutorials to read first
        published: Visible to the public when True
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        title: str,
        description: str,
        content: str,
        author_id: UUID,
        id: UUID | None = None,
        version: int = 1,
        difficulty: str = Difficulty.BEGINNER.value,
        tags: list[str] | None = None,
        exercises: list[TutorialExercise] | None = None,
        prerequisites: list[UUID] | None = None,
        published: bool = False,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title
        self.description = description
        self.content = content
        self.author_id = author_id
        self.version = version
        self.difficulty = difficulty
        self.tags = list(tags or [])
        self.exercises = list(exercises or [])
        self.prerequisites = list(prerequisites or [])
        self.published = published
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)
        self.updated_at = ensure_utc_aware(updated_at) or self.created_at

    @classmethod
    def from_row(cls, row: Any) -> "Tutorial":
        """Create Tutorial instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title,
            description=row.description or "",
            content=row.content or "",
            author_id=row.author_id,
            version=row.version or 1,
            difficulty=row.difficulty or Difficulty.BEGINNER.value,
            tags=row.tags or [],
            exercises=[TutorialExercise.from_map(dict(m)) for m in row.exercises or []],
            prerequisites=row.prerequisites or [],
            published=bool(row.published),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def exercise_maps(self) -> list[dict[str, str]]:
        return [exercise.to_map() for exercise in self.exercises]

    def __repr__(self) -> str:
        return f"<Tutorial {self.title!r} v{self.version} published={self.published}>"
