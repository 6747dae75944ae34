"""Database models for learner progress tracking.

One ``module_progress`` row per (user, training module). Exercise progress is
embedded in the row as a list of text maps so the whole record is read and
written as a single document.

Rows carry a ``version`` counter used by conditional (LWT) writes.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID


# ==============================================================================
# Helper Functions
# ==============================================================================


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def completion_percent(completed: int, total: int) -> int:
    """Whole-number completion percentage, halves rounded up.

    >>> completion_percent(1, 2)
    50
    >>> completion_percent(1, 3)
    33
    >>> completion_percent(0, 0)
    0
    """
    if total <= 0:
        return 0
    ratio = Decimal(100 * completed) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _format_dt(dt: datetime | None) -> str:
    return dt.isoformat() if dt else ""


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    return ensure_utc_aware(datetime.fromisoformat(value))


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Progress per user and training module
# Partition key: user_id so "all progress of a learner" is a single partition
# Exercises: ordered list of {exercise_id, completed, completed_steps,
# started_at, completed_at} text maps
MODULE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.module_progress (
    user_id UUID,
    module_id TEXT,
    completed BOOLEAN,
    progress INT,
    exercises LIST<FROZEN<MAP<TEXT, TEXT>>>,
    started_at TIMESTAMP,
    last_accessed TIMESTAMP,
    completed_at TIMESTAMP,
    version INT,
    PRIMARY KEY ((user_id), module_id)
) WITH CLUSTERING ORDER BY (module_id ASC)
"""

# All CQL statements for table setup
PROGRESS_TABLES_CQL = [
    MODULE_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class ExerciseProgress:
    """Progress of a single exercise inside a module.

    Attributes:
        exercise_id: Catalog exercise identifier (opaque string)
        completed: Whether the exercise has been solved
        completed_steps: Indices of solved steps (step-by-step exercises)
        started_at: When the exercise was first tracked
        completed_at: When the exercise was first completed
    """

    def __init__(
        self,
        exercise_id: str,
        completed: bool = False,
        completed_steps: list[int] | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
    ):
        self.exercise_id = exercise_id
        self.completed = completed
        self.completed_steps = list(completed_steps or [])
        self.started_at = ensure_utc_aware(started_at) or datetime.now(UTC)
        self.completed_at = ensure_utc_aware(completed_at)

    @classmethod
    def from_map(cls, data: dict[str, str]) -> "ExerciseProgress":
        """Create ExerciseProgress from a stored text map."""
        steps = data.get("completed_steps") or ""
        return cls(
            exercise_id=data["exercise_id"],
            completed=data.get("completed") == "true",
            completed_steps=[int(step) for step in steps.split(",") if step],
            started_at=_parse_dt(data.get("started_at")),
            completed_at=_parse_dt(data.get("completed_at")),
        )

    def to_map(self) -> dict[str, str]:
        """Serialize to the text map stored in Cassandra."""
        return {
            "exercise_id": self.exercise_id,
            "completed": "true" if self.completed else "false",
            "completed_steps": ",".join(str(step) for step in self.completed_steps),
            "started_at": _format_dt(self.started_at),
            "completed_at": _format_dt(self.completed_at),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "completed": self.completed,
            "completed_steps": list(self.completed_steps),
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }

    def __repr__(self) -> str:
        return (
            f"<ExerciseProgress {self.exercise_id} completed={self.completed} "
            f"steps={self.completed_steps}>"
        )


class ProgressRecord:
    """Progress of a user through one training module.

    Attributes:
        user_id: Owning user UUID (immutable)
        module_id: Catalog module identifier (opaque string)
        completed: True when every tracked exercise is completed
        progress: Completion percentage (0-100)
        exercises: Tracked exercises, unique by exercise_id, in insertion order
        started_at: Creation timestamp
        last_accessed: Last write timestamp
        completed_at: When the module was completed (None while incomplete)
        version: Optimistic concurrency counter, 0 for unsaved records
    """

    def __init__(
        self,
        user_id: UUID,
        module_id: str,
        completed: bool = False,
        progress: int = 0,
        exercises: list[ExerciseProgress] | None = None,
        started_at: datetime | None = None,
        last_accessed: datetime | None = None,
        completed_at: datetime | None = None,
        version: int = 0,
    ):
        self.user_id = user_id
        self.module_id = module_id
        self.completed = completed
        self.progress = progress
        self.exercises = list(exercises or [])
        self.started_at = ensure_utc_aware(started_at) or datetime.now(UTC)
        self.last_accessed = ensure_utc_aware(last_accessed) or self.started_at
        self.completed_at = ensure_utc_aware(completed_at)
        self.version = version

    @property
    def is_new(self) -> bool:
        """Record has never been persisted."""
        return self.version == 0

    @property
    def completed_count(self) -> int:
        return sum(1 for exercise in self.exercises if exercise.completed)

    def find_exercise(self, exercise_id: str) -> ExerciseProgress | None:
        for exercise in self.exercises:
            if exercise.exercise_id == exercise_id:
                return exercise
        return None

    def apply_module_update(
        self,
        completed: bool = False,
        progress: int = 0,
        now: datetime | None = None,
    ) -> None:
        """Overwrite module-level completion; omitted values reset to False/0."""
        now = now or datetime.now(UTC)
        if completed and (not self.completed or self.completed_at is None):
            self.completed_at = now
        elif not completed:
            self.completed_at = None
        self.completed = completed
        self.progress = progress
        self.last_accessed = now

    def apply_exercise_update(
        self,
        exercise_id: str,
        completed: bool | None = None,
        completed_steps: list[int] | None = None,
        now: datetime | None = None,
    ) -> ExerciseProgress:
        """Record exercise progress and recompute the module aggregate.

        Unknown exercises are appended. ``completed`` can only switch an
        exercise on; ``completed_steps`` replaces the stored list when given.
        """
        now = now or datetime.now(UTC)
        exercise = self.find_exercise(exercise_id)
        if exercise is None:
            exercise = ExerciseProgress(exercise_id=exercise_id, started_at=now)
            self.exercises.append(exercise)

        exercise.completed = bool(completed) or exercise.completed
        if completed_steps is not None:
            exercise.completed_steps = list(completed_steps)
        if exercise.completed and exercise.completed_at is None:
            exercise.completed_at = now

        self.recompute(now)
        self.last_accessed = now
        return exercise

    def recompute(self, now: datetime | None = None) -> None:
        """Derive progress and completion from the tracked exercises."""
        total = len(self.exercises)
        if total == 0:
            return
        done = self.completed_count
        self.progress = completion_percent(done, total)
        self.completed = done == total
        if self.completed:
            if self.completed_at is None:
                self.completed_at = now or datetime.now(UTC)
        elif done > 0:
            self.completed_at = None
        # done == 0 keeps completed_at; only a module-level write clears it

    @classmethod
    def placeholder(cls, user_id: UUID, module_id: str) -> "ProgressRecord":
        """Zero-value record returned for modules the user never touched."""
        return cls(user_id=user_id, module_id=module_id)

    @classmethod
    def from_row(cls, row: Any) -> "ProgressRecord":
        """Create ProgressRecord instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            module_id=row.module_id,
            completed=bool(row.completed),
            progress=row.progress or 0,
            exercises=[ExerciseProgress.from_map(dict(m)) for m in row.exercises or []],
            started_at=row.started_at,
            last_accessed=row.last_accessed,
            completed_at=row.completed_at,
            version=row.version or 0,
        )

    def exercise_maps(self) -> list[dict[str, str]]:
        return [exercise.to_map() for exercise in self.exercises]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "module_id": self.module_id,
            "completed": self.completed,
            "progress": self.progress,
            "exercises": [exercise.to_dict() for exercise in self.exercises],
            "started_at": self.started_at,
            "last_accessed": self.last_accessed,
            "completed_at": self.completed_at,
        }

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord user={self.user_id} module={self.module_id} "
            f"{self.completed_count}/{len(self.exercises)} {self.progress}%>"
        )
