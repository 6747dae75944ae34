"""Learner progress tracking service layer.

Business logic for:
- Module-level progress upserts
- Exercise-level progress with aggregate recomputation
- Progress queries (single module and all modules of a user)

Every write is a Cassandra lightweight transaction. New rows are inserted with
``IF NOT EXISTS``; existing rows are updated with ``IF version = ?``. A write
that loses the race re-reads the row and re-applies the change.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .models import ProgressRecord


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)

DEFAULT_MAX_WRITE_ATTEMPTS = 5


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ProgressError(Exception):
    """Base progress error."""

    def __init__(self, message: str, code: str = "progress_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ProgressConflictError(ProgressError):
    """Concurrent writers kept winning the conditional update."""

    def __init__(
        self,
        message: str = "Progress was modified concurrently, please retry",
    ):
        super().__init__(message, "progress_conflict")


# ==============================================================================
# Progress Service
# ==============================================================================


class ProgressService:
    """Service for per-user, per-module progress records."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
    ):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self.max_write_attempts = max_write_attempts
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.module_progress
            WHERE user_id = ? AND module_id = ?
        """)

        self._get_user_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.module_progress
            WHERE user_id = ?
        """)

        self._insert_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.module_progress
            (user_id, module_id, completed, progress, exercises,
             started_at, last_accessed, completed_at, version)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._update_progress = self.session.prepare(f"""
            UPDATE {self.keyspace}.module_progress
            SET completed = ?, progress = ?, exercises = ?,
                last_accessed = ?, completed_at = ?, version = ?
            WHERE user_id = ? AND module_id = ?
            IF version = ?
        """)

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_record(self, user_id: UUID, module_id: str) -> ProgressRecord | None:
        """Get the stored record, or None if the user never touched the module."""
        result = await self.session.aexecute(self._get_progress, [user_id, module_id])
        row = result.one()
        return ProgressRecord.from_row(row) if row else None

    async def get_module_progress(
        self, user_id: UUID, module_id: str
    ) -> ProgressRecord:
        """Get module progress, falling back to an unsaved zero-value record."""
        record = await self.get_record(user_id, module_id)
        if record is None:
            return ProgressRecord.placeholder(user_id, module_id)
        return record

    async def list_progress(self, user_id: UUID) -> list[ProgressRecord]:
        """Get every progress record of a user."""
        rows = await self.session.aexecute(self._get_user_progress, [user_id])
        return [ProgressRecord.from_row(row) for row in rows]

    # ==========================================================================
    # Updates
    # ==========================================================================

    async def update_module_progress(
        self,
        user_id: UUID,
        module_id: str,
        completed: bool = False,
        progress: int = 0,
    ) -> ProgressRecord:
        """Create or update module-level progress.

        Args:
            user_id: User UUID
            module_id: Module identifier
            completed: New completion flag, False when omitted
            progress: New percentage, 0 when omitted

        Returns:
            The persisted ProgressRecord
        """

        def mutate(record: ProgressRecord, now: datetime) -> None:
            record.apply_module_update(completed=completed, progress=progress, now=now)

        record = await self._write(user_id, module_id, mutate)

        logger.info(
            "module_progress_updated",
            user_id=str(user_id),
            module_id=module_id,
            completed=record.completed,
            progress=record.progress,
        )
        return record

    async def update_exercise_progress(
        self,
        user_id: UUID,
        module_id: str,
        exercise_id: str,
        completed: bool | None = None,
        completed_steps: list[int] | None = None,
    ) -> ProgressRecord:
        """Record exercise progress and recompute the module aggregate.

        Creates the module record and the exercise entry when missing.

        Args:
            user_id: User UUID
            module_id: Module identifier
            exercise_id: Exercise identifier
            completed: Marks the exercise completed when True (never unsets)
            completed_steps: Replaces the stored step indices when given

        Returns:
            The persisted ProgressRecord
        """

        def mutate(record: ProgressRecord, now: datetime) -> None:
            record.apply_exercise_update(
                exercise_id,
                completed=completed,
                completed_steps=completed_steps,
                now=now,
            )

        record = await self._write(user_id, module_id, mutate)

        logger.info(
            "exercise_progress_updated",
            user_id=str(user_id),
            module_id=module_id,
            exercise_id=exercise_id,
            module_completed=record.completed,
            progress=record.progress,
        )
        return record

    # ==========================================================================
    # Conditional writes
    # ==========================================================================

    async def _write(
        self,
        user_id: UUID,
        module_id: str,
        mutate: Callable[[ProgressRecord, datetime], None],
    ) -> ProgressRecord:
        """Read, mutate and conditionally save a record, retrying on conflict."""
        for attempt in range(1, self.max_write_attempts + 1):
            now = datetime.now(UTC)
            record = await self.get_record(user_id, module_id)
            if record is None:
                record = ProgressRecord(
                    user_id=user_id,
                    module_id=module_id,
                    started_at=now,
                    last_accessed=now,
                )
            mutate(record, now)

            if await self._save(record):
                return record

            logger.warning(
                "progress_write_conflict",
                user_id=str(user_id),
                module_id=module_id,
                attempt=attempt,
            )

        logger.error(
            "progress_write_gave_up",
            user_id=str(user_id),
            module_id=module_id,
            attempts=self.max_write_attempts,
        )
        raise ProgressConflictError

    async def _save(self, record: ProgressRecord) -> bool:
        """Persist with a version check. Returns False when the write lost."""
        next_version = record.version + 1
        if record.is_new:
            result = await self.session.aexecute(
                self._insert_progress,
                [
                    record.user_id,
                    record.module_id,
                    record.completed,
                    record.progress,
                    record.exercise_maps(),
                    record.started_at,
                    record.last_accessed,
                    record.completed_at,
                    next_version,
                ],
            )
        else:
            result = await self.session.aexecute(
                self._update_progress,
                [
                    record.completed,
                    record.progress,
                    record.exercise_maps(),
                    record.last_accessed,
                    record.completed_at,
                    next_version,
                    record.user_id,
                    record.module_id,
                    record.version,
                ],
            )

        if not result.was_applied:
            return False
        record.version = next_version
        return True
