"""Module list: the catalog annotated with the learner's progress."""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from gittrainer.catalog import TRAINING_CATALOG, Catalog, Module
from gittrainer.client import ProgressClient


logger = structlog.get_logger(__name__)

LOAD_FAILED_MESSAGE = "Could not load your progress. Showing modules without it."


@dataclass
class ModuleEntry:
    """One card of the module list."""

    module: Module
    progress: int = 0
    completed: bool = False
    prerequisites_met: bool = True

    @property
    def action_label(self) -> str:
        if self.completed:
            return "Review Module"
        if self.progress > 0:
            return "Continue Module"
        return "Start Module"


class ModuleList:
    """Builds the module list from the catalog and the stored progress."""

    def __init__(
        self,
        progress_client: ProgressClient,
        catalog: Catalog = TRAINING_CATALOG,
    ) -> None:
        self.client = progress_client
        self.catalog = catalog
        self.entries: list[ModuleEntry] = []
        self.message: str | None = None

    async def refresh(self) -> list[ModuleEntry]:
        """Fetch all progress and rebuild the entries.

        On failure every module falls back to zero progress and ``message``
        explains why until ``dismiss_message()`` is called.
        """
        self.message = None
        try:
            records = await self.client.get_all_progress()
        except httpx.HTTPError as e:
            logger.error("progress_list_failed", error=str(e))
            self.message = LOAD_FAILED_MESSAGE
            records = []

        by_module: dict[str, dict[str, Any]] = {r["moduleId"]: r for r in records}
        completed_ids = {
            module_id for module_id, r in by_module.items() if r.get("completed")
        }

        self.entries = [
            ModuleEntry(
                module=module,
                progress=int(by_module.get(module.id, {}).get("progress", 0)),
                completed=module.id in completed_ids,
                prerequisites_met=self.catalog.prerequisites_met(
                    module.id, completed_ids
                ),
            )
            for module in self.catalog
        ]
        return self.entries

    def dismiss_message(self) -> None:
        self.message = None
