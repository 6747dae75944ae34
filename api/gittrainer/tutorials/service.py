"""Tutorial service layer.

Business logic for:
- Tutorial creation with unique titles
- Partial updates with content versioning
- Public (published) and per-author listings
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .models import Tutorial
from .schemas import CreateTutorialRequest, UpdateTutorialRequest


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class TutorialError(Exception):
    """Base tutorial error."""

    def __init__(self, message: str, code: str = "tutorial_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class TutorialNotFoundError(TutorialError):
    """Tutorial not found."""

    def __init__(self, message: str = "Tutorial not found"):
        super().__init__(message, "tutorial_not_found")


class TitleExistsError(TutorialError):
    """Another tutorial already uses this title."""

    def __init__(self, message: str = "A tutorial with this title already exists"):
        super().__init__(message, "title_exists")


# ==============================================================================
# Tutorial Service
# ==============================================================================


def _newest_first(tutorials: list[Tutorial]) -> list[Tutorial]:
    return sorted(tutorials, key=lambda t: t.created_at, reverse=True)


class TutorialService:
    """Service for tutorial CRUD."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_tutorial = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.tutorials WHERE id = ?"
        )
        self._get_by_title = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.tutorials WHERE title = ?"
        )
        self._get_by_author = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.tutorials WHERE author_id = ?"
        )
        self._get_published = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.tutorials WHERE published = ?"
        )
        self._insert_tutorial = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.tutorials
            (id, title, description, content, author_id, version, difficulty,
             tags, exercises, prerequisites, published, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._update_tutorial = self.session.prepare(f"""
            UPDATE {self.keyspace}.tutorials
            SET title = ?, description = ?, content = ?, version = ?,
                difficulty = ?, tags = ?, exercises = ?, prerequisites = ?,
                published = ?, updated_at = ?
            WHERE id = ?
        """)
        self._delete_tutorial = self.session.prepare(
            f"DELETE FROM {self.keyspace}.tutorials WHERE id = ?"
        )

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------

    async def get_tutorial(self, tutorial_id: UUID) -> Tutorial | None:
        """Get tutorial by ID, published or not."""
        result = await self.session.aexecute(self._get_tutorial, [tutorial_id])
        row = result.one()
        return Tutorial.from_row(row) if row else None

    async def get_published_tutorial(self, tutorial_id: UUID) -> Tutorial:
        """Get a published tutorial.

        Raises:
            TutorialNotFoundError: If missing or not published
        """
        tutorial = await self.get_tutorial(tutorial_id)
        if tutorial is None or not tutorial.published:
            raise TutorialNotFoundError
        return tutorial

    async def _title_taken(self, title: str, exclude_id: UUID | None = None) -> bool:
        result = await self.session.aexecute(self._get_by_title, [title])
        return any(row.id != exclude_id for row in result)

    async def list_published(self) -> list[Tutorial]:
        """List published tutorials, newest first."""
        rows = await self.session.aexecute(self._get_published, [True])
        return _newest_first([Tutorial.from_row(row) for row in rows])

    async def list_by_author(self, author_id: UUID) -> list[Tutorial]:
        """List every tutorial of an author, newest first."""
        rows = await self.session.aexecute(self._get_by_author, [author_id])
        return _newest_first([Tutorial.from_row(row) for row in rows])

    # --------------------------------------------------------------------------
    # Mutations
    # --------------------------------------------------------------------------

    async def create_tutorial(
        self,
        data: CreateTutorialRequest,
        author_id: UUID,
    ) -> Tutorial:
        """Create a tutorial authored by ``author_id``.

        Raises:
            TitleExistsError: If the title is already used
        """
        if await self._title_taken(data.title):
            raise TitleExistsError

        tutorial = Tutorial(
            title=data.title,
            description=data.description,
            content=data.content,
            author_id=author_id,
            difficulty=data.difficulty.value,
            tags=data.tags,
            exercises=[e.to_entity() for e in data.exercises],
            prerequisites=data.prerequisites,
            published=data.published,
        )

        await self.session.aexecute(
            self._insert_tutorial,
            [
                tutorial.id,
                tutorial.title,
                tutorial.description,
                tutorial.content,
                tutorial.author_id,
                tutorial.version,
                tutorial.difficulty,
                tutorial.tags,
                tutorial.exercise_maps(),
                tutorial.prerequisites,
                tutorial.published,
                tutorial.created_at,
                tutorial.updated_at,
            ],
        )

        logger.info(
            "tutorial_created",
            tutorial_id=str(tutorial.id),
            author_id=str(author_id),
        )
        return tutorial

    async def update_tutorial(
        self,
        tutorial: Tutorial,
        data: UpdateTutorialRequest,
    ) -> Tutorial:
        """Apply a partial update to a loaded tutorial.

        Raises:
            TitleExistsError: If the new title belongs to another tutorial
        """
        if data.title is not None and data.title != tutorial.title:
            if await self._title_taken(data.title, exclude_id=tutorial.id):
                raise TitleExistsError
            tutorial.title = data.title
        if data.description is not None:
            tutorial.description = data.description
        if data.content is not None:
            tutorial.content = data.content
            tutorial.version += 1
        if data.difficulty is not None:
            tutorial.difficulty = data.difficulty.value
        if data.tags is not None:
            tutorial.tags = data.tags
        if data.exercises is not None:
            tutorial.exercises = [e.to_entity() for e in data.exercises]
        if data.prerequisites is not None:
            tutorial.prerequisites = data.prerequisites
        if data.published is not None:
            tutorial.published = data.published

        tutorial.updated_at = datetime.now(UTC)

        await self.session.aexecute(
            self._update_tutorial,
            [
                tutorial.title,
                tutorial.description,
                tutorial.content,
                tutorial.version,
                tutorial.difficulty,
                tutorial.tags,
                tutorial.exercise_maps(),
                tutorial.prerequisites,
                tutorial.published,
                tutorial.updated_at,
                tutorial.id,
            ],
        )

        logger.info(
            "tutorial_updated",
            tutorial_id=str(tutorial.id),
            version=tutorial.version,
        )
        return tutorial

    async def delete_tutorial(self, tutorial_id: UUID) -> None:
        """Delete a tutorial."""
        await self.session.aexecute(self._delete_tutorial, [tutorial_id])
        logger.info("tutorial_deleted", tutorial_id=str(tutorial_id))
