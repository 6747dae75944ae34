"""Pydantic schemas for learner progress tracking.

The progress API speaks camelCase on the wire (``moduleId``,
``completedSteps``, ``lastAccessed``); Python code uses snake_case names.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import ExerciseProgress, ProgressRecord


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==============================================================================
# Request Schemas
# ==============================================================================


class UpdateModuleProgressRequest(CamelModel):
    """Module-level update. Omitted fields reset to False/0."""

    completed: bool = Field(default=False, description="Module completed")
    progress: int = Field(default=0, ge=0, le=100, description="Completion percentage")


class UpdateExerciseProgressRequest(CamelModel):
    """Exercise-level update."""

    completed: bool | None = Field(
        default=None, description="Mark the exercise completed (cannot unset)"
    )
    completed_steps: list[Annotated[int, Field(ge=0)]] | None = Field(
        default=None, description="Solved step indices, replaces the stored list"
    )


# ==============================================================================
# Response Schemas
# ==============================================================================


class ExerciseProgressResponse(CamelModel):
    """Progress of one exercise."""

    exercise_id: str
    completed: bool
    completed_steps: list[int]
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: ExerciseProgress) -> "ExerciseProgressResponse":
        """Create response from entity."""
        return cls(
            exercise_id=entity.exercise_id,
            completed=entity.completed,
            completed_steps=entity.completed_steps,
            started_at=entity.started_at,
            completed_at=entity.completed_at,
        )


class ProgressRecordResponse(CamelModel):
    """Progress of one module. Timestamps are null for untouched modules."""

    module_id: str
    user_id: UUID
    completed: bool
    progress: int = Field(description="0-100 percentage")
    exercises: list[ExerciseProgressResponse] = Field(default_factory=list)
    started_at: datetime | None = None
    last_accessed: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: ProgressRecord) -> "ProgressRecordResponse":
        """Create response from entity."""
        persisted = not entity.is_new
        return cls(
            module_id=entity.module_id,
            user_id=entity.user_id,
            completed=entity.completed,
            progress=entity.progress,
            exercises=[
                ExerciseProgressResponse.from_entity(e) for e in entity.exercises
            ],
            started_at=entity.started_at if persisted else None,
            last_accessed=entity.last_accessed if persisted else None,
            completed_at=entity.completed_at,
        )
