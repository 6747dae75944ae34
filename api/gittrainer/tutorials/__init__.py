"""Tutorials module.

Lecturer-authored tutorials with embedded exercises, publication and versioning.
"""

from .models import Difficulty, Tutorial, TutorialExercise
from .router import router
from .service import (
    TitleExistsError,
    TutorialError,
    TutorialNotFoundError,
    TutorialService,
)


__all__ = [
    "Difficulty",
    "TitleExistsError",
    "Tutorial",
    "TutorialError",
    "TutorialExercise",
    "TutorialNotFoundError",
    "TutorialService",
    "router",
]
