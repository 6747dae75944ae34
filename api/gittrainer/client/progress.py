"""Progress API client.

One authenticated request per operation. No caching, retry or batching:
failures surface as ``httpx.HTTPError`` and callers decide what to do.
"""

from typing import Any

from .base import ApiClient


class ProgressClient(ApiClient):
    """Calls the ``/api/progress`` endpoints for the session's user."""

    async def get_all_progress(self) -> list[dict[str, Any]]:
        return await self.request("GET", "/api/progress")

    async def get_module_progress(self, module_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/api/progress/module/{module_id}")

    async def update_module_progress(
        self,
        module_id: str,
        completed: bool | None = None,
        progress: int | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if completed is not None:
            body["completed"] = completed
        if progress is not None:
            body["progress"] = progress
        return await self.request(
            "POST", f"/api/progress/module/{module_id}", json=body
        )

    async def update_exercise_progress(
        self,
        module_id: str,
        exercise_id: str,
        completed: bool | None = None,
        completed_steps: list[int] | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if completed is not None:
            body["completed"] = completed
        if completed_steps is not None:
            body["completedSteps"] = completed_steps
        return await self.request(
            "POST",
            f"/api/progress/module/{module_id}/exercise/{exercise_id}",
            json=body,
        )
