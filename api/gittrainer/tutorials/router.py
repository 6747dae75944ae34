"""Tutorial API endpoints.

Provides routes for:
- Public listing and reading of published tutorials
- Lecturer/admin authoring (create, update, delete)
- Per-author listings
"""

from uuid import UUID

from fastapi import APIRouter, status

from gittrainer.auth.dependencies import LecturerUser

from .dependencies import OwnedTutorial, TutorialServiceDep, handle_tutorial_error
from .schemas import (
    CreateTutorialRequest,
    MessageResponse,
    TutorialResponse,
    TutorialSummaryResponse,
    UpdateTutorialRequest,
)
from .service import TutorialError


router = APIRouter(prefix="/api/tutorials", tags=["tutorials"])


# ==============================================================================
# Public Endpoints
# ==============================================================================


@router.get(
    "/published",
    response_model=list[TutorialSummaryResponse],
    summary="List published tutorials",
)
async def list_published_tutorials(
    tutorial_service: TutorialServiceDep,
) -> list[TutorialSummaryResponse]:
    """List published tutorials without their content, newest first."""
    tutorials = await tutorial_service.list_published()
    return [TutorialSummaryResponse.from_entity(t) for t in tutorials]


@router.get(
    "/published/{tutorial_id}",
    response_model=TutorialResponse,
    summary="Get published tutorial",
    responses={404: {"description": "Tutorial not found"}},
)
async def get_published_tutorial(
    tutorial_id: UUID,
    tutorial_service: TutorialServiceDep,
) -> TutorialResponse:
    """Get a single published tutorial with content."""
    try:
        tutorial = await tutorial_service.get_published_tutorial(tutorial_id)
    except TutorialError as e:
        raise handle_tutorial_error(e) from e
    return TutorialResponse.from_entity(tutorial)


# ==============================================================================
# Authoring Endpoints
# ==============================================================================


@router.post(
    "",
    response_model=TutorialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create tutorial (lecturer/admin)",
    responses={409: {"description": "Title already exists"}},
)
async def create_tutorial(
    data: CreateTutorialRequest,
    tutorial_service: TutorialServiceDep,
    user: LecturerUser,
) -> TutorialResponse:
    """Create a tutorial authored by the current user."""
    try:
        tutorial = await tutorial_service.create_tutorial(data, author_id=user.id)
    except TutorialError as e:
        raise handle_tutorial_error(e) from e
    return TutorialResponse.from_entity(tutorial)


@router.patch(
    "/{tutorial_id}",
    response_model=TutorialResponse,
    summary="Update tutorial (author/admin)",
    responses={
        403: {"description": "Not the author"},
        404: {"description": "Tutorial not found"},
    },
)
async def update_tutorial(
    data: UpdateTutorialRequest,
    tutorial: OwnedTutorial,
    tutorial_service: TutorialServiceDep,
) -> TutorialResponse:
    """Update a tutorial. Changing the content increments its version."""
    try:
        updated = await tutorial_service.update_tutorial(tutorial, data)
    except TutorialError as e:
        raise handle_tutorial_error(e) from e
    return TutorialResponse.from_entity(updated)


@router.delete(
    "/{tutorial_id}",
    response_model=MessageResponse,
    summary="Delete tutorial (author/admin)",
    responses={
        403: {"description": "Not the author"},
        404: {"description": "Tutorial not found"},
    },
)
async def delete_tutorial(
    tutorial: OwnedTutorial,
    tutorial_service: TutorialServiceDep,
) -> MessageResponse:
    """Delete a tutorial."""
    await tutorial_service.delete_tutorial(tutorial.id)
    return MessageResponse(message="Tutorial deleted successfully")


@router.get(
    "/author/{author_id}",
    response_model=list[TutorialResponse],
    summary="List tutorials by author (lecturer/admin)",
)
async def list_author_tutorials(
    author_id: UUID,
    tutorial_service: TutorialServiceDep,
    user: LecturerUser,
) -> list[TutorialResponse]:
    """List every tutorial of an author, drafts included, newest first."""
    tutorials = await tutorial_service.list_by_author(author_id)
    return [TutorialResponse.from_entity(t) for t in tutorials]
