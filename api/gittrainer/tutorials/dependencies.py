"""FastAPI dependencies for tutorials.

Provides dependency injection for:
- Tutorial service
- Ownership checks for edit/delete
- Error handlers
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from gittrainer.auth.dependencies import CurrentUser
from gittrainer.auth.permissions import is_admin
from gittrainer.auth.schemas import UserResponse

from .models import Tutorial
from .service import TutorialError, TutorialService


async def get_tutorial_service(request: Request) -> TutorialService:
    """Get tutorial service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "tutorial_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tutorial service not available",
        )
    return app_state.tutorial_service


TutorialServiceDep = Annotated[TutorialService, Depends(get_tutorial_service)]


def is_owner_or_admin(user: UserResponse, author_id: UUID) -> bool:
    """Check if user authored the tutorial or is an admin."""
    if is_admin(user.role):
        return True
    return str(user.id) == str(author_id)


async def get_owned_tutorial(
    tutorial_id: UUID,
    tutorial_service: TutorialServiceDep,
    user: CurrentUser,
) -> Tutorial:
    """Load a tutorial the current user may modify.

    Raises:
        HTTPException(404): If the tutorial doesn't exist
        HTTPException(403): If the user is neither author nor admin
    """
    tutorial = await tutorial_service.get_tutorial(tutorial_id)
    if tutorial is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tutorial not found",
        )

    if not is_owner_or_admin(user, tutorial.author_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this tutorial",
        )

    return tutorial


OwnedTutorial = Annotated[Tutorial, Depends(get_owned_tutorial)]


def handle_tutorial_error(error: TutorialError) -> HTTPException:
    """Convert tutorial errors to HTTP exceptions."""
    status_map = {
        "tutorial_not_found": status.HTTP_404_NOT_FOUND,
        "title_exists": status.HTTP_409_CONFLICT,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
