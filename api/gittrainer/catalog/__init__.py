"""Static Git training catalog used by the learner client."""

from .models import Catalog, Difficulty, Exercise, Module, Step
from .modules import TRAINING_CATALOG


__all__ = [
    "TRAINING_CATALOG",
    "Catalog",
    "Difficulty",
    "Exercise",
    "Module",
    "Step",
]
