"""Learner progress API endpoints.

Provides routes for:
- Listing all progress of the current user
- Reading progress of one module (zero-value record when untouched)
- Module-level and exercise-level progress updates
"""

from fastapi import APIRouter

from gittrainer.auth.dependencies import CurrentUser
from gittrainer.core.context import set_module_id

from .dependencies import ProgressServiceDep, handle_progress_error
from .schemas import (
    ProgressRecordResponse,
    UpdateExerciseProgressRequest,
    UpdateModuleProgressRequest,
)
from .service import ProgressError


router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get(
    "",
    response_model=list[ProgressRecordResponse],
    summary="List my progress",
)
async def list_progress(
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> list[ProgressRecordResponse]:
    """Get progress for every module the current user has touched."""
    records = await progress_service.list_progress(user.id)
    return [ProgressRecordResponse.from_entity(r) for r in records]


@router.get(
    "/module/{module_id}",
    response_model=ProgressRecordResponse,
    summary="Get module progress",
)
async def get_module_progress(
    module_id: str,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> ProgressRecordResponse:
    """Get progress for one module.

    Never 404s: untouched modules yield a zero-value record that is not saved.
    """
    set_module_id(module_id)
    record = await progress_service.get_module_progress(user.id, module_id)
    return ProgressRecordResponse.from_entity(record)


@router.post(
    "/module/{module_id}",
    response_model=ProgressRecordResponse,
    summary="Update module progress",
)
async def update_module_progress(
    module_id: str,
    data: UpdateModuleProgressRequest,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> ProgressRecordResponse:
    """Create or update module-level progress."""
    set_module_id(module_id)
    try:
        record = await progress_service.update_module_progress(
            user_id=user.id,
            module_id=module_id,
            completed=data.completed,
            progress=data.progress,
        )
        return ProgressRecordResponse.from_entity(record)
    except ProgressError as e:
        raise handle_progress_error(e) from e


@router.post(
    "/module/{module_id}/exercise/{exercise_id}",
    response_model=ProgressRecordResponse,
    summary="Update exercise progress",
)
async def update_exercise_progress(
    module_id: str,
    exercise_id: str,
    data: UpdateExerciseProgressRequest,
    progress_service: ProgressServiceDep,
    user: CurrentUser,
) -> ProgressRecordResponse:
    """Record exercise progress and return the recomputed module record.

    Unknown exercise ids are tracked on first use.
    """
    set_module_id(module_id)
    try:
        record = await progress_service.update_exercise_progress(
            user_id=user.id,
            module_id=module_id,
            exercise_id=exercise_id,
            completed=data.completed,
            completed_steps=data.completed_steps,
        )
        return ProgressRecordResponse.from_entity(record)
    except ProgressError as e:
        raise handle_progress_error(e) from e
