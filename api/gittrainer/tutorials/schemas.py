"""Pydantic schemas for tutorials."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import DEFAULT_EXERCISE_POINTS, Difficulty, Tutorial, TutorialExercise


# ==============================================================================
# Request Schemas
# ==============================================================================


class ExerciseDescriptor(BaseModel):
    """Exercise attached to a tutorial."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    difficulty: Difficulty = Field(default=Difficulty.BEGINNER)
    points: int = Field(default=DEFAULT_EXERCISE_POINTS, ge=0)

    def to_entity(self) -> TutorialExercise:
        return TutorialExercise(
            title=self.title,
            description=self.description,
            difficulty=self.difficulty.value,
            points=self.points,
        )


class CreateTutorialRequest(BaseModel):
    """Create tutorial request."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, description="Markdown body")
    difficulty: Difficulty = Field(default=Difficulty.BEGINNER)
    tags: list[str] = Field(default_factory=list)
    exercises: list[ExerciseDescriptor] = Field(default_factory=list)
    prerequisites: list[UUID] = Field(default_factory=list)
    published: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()


class UpdateTutorialRequest(BaseModel):
    """Partial tutorial update. Sending ``content`` bumps the version."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    content: str | None = Field(None, min_length=1)
    difficulty: Difficulty | None = None
    tags: list[str] | None = None
    exercises: list[ExerciseDescriptor] | None = None
    prerequisites: list[UUID] | None = None
    published: bool | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


# ==============================================================================
# Response Schemas
# ==============================================================================


class TutorialSummaryResponse(BaseModel):
    """Tutorial without its content body (listings)."""

    id: UUID
    title: str
    description: str
    author_id: UUID
    version: int
    difficulty: Difficulty
    tags: list[str]
    exercises: list[ExerciseDescriptor]
    prerequisites: list[UUID]
    published: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def _fields(cls, tutorial: Tutorial) -> dict:
        return {
            "id": tutorial.id,
            "title": tutorial.title,
            "description": tutorial.description,
            "author_id": tutorial.author_id,
            "version": tutorial.version,
            "difficulty": Difficulty(tutorial.difficulty),
            "tags": tutorial.tags,
            "exercises": [
                ExerciseDescriptor(
                    title=e.title,
                    description=e.description,
                    difficulty=Difficulty(e.difficulty),
                    points=e.points,
                )
                for e in tutorial.exercises
            ],
            "prerequisites": tutorial.prerequisites,
            "published": tutorial.published,
            "created_at": tutorial.created_at,
            "updated_at": tutorial.updated_at,
        }

    @classmethod
    def from_entity(cls, tutorial: Tutorial) -> "TutorialSummaryResponse":
        return cls(**cls._fields(tutorial))


class TutorialResponse(TutorialSummaryResponse):
    """Full tutorial including content."""

    content: str

    @classmethod
    def from_entity(cls, tutorial: Tutorial) -> "TutorialResponse":
        return cls(**cls._fields(tutorial), content=tutorial.content)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
