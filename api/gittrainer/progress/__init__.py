"""Learner progress tracking module.

Per-user, per-module progress records with embedded exercise progress.
"""

from .dependencies import ProgressServiceDep, get_progress_service
from .models import ExerciseProgress, ProgressRecord, completion_percent
from .router import router
from .service import ProgressConflictError, ProgressError, ProgressService


__all__ = [
    "ExerciseProgress",
    "ProgressConflictError",
    "ProgressError",
    "ProgressRecord",
    "ProgressService",
    "ProgressServiceDep",
    "completion_percent",
    "get_progress_service",
    "router",
]
