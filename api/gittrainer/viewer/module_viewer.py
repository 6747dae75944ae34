"""Module viewer state machine.

A module is shown as a content page (``active_step`` 0) followed by one page
per exercise (``active_step`` 1..N). Step-by-step exercises additionally track
``current_exercise_step``.

Progress writes are optimistic: the local state moves on immediately and a
failed request is logged and dropped.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from gittrainer.catalog import TRAINING_CATALOG, Catalog, Exercise, Module
from gittrainer.client import ProgressClient
from gittrainer.core.context import RequestContext
from gittrainer.progress.models import completion_percent


logger = structlog.get_logger(__name__)

SUCCESS_MESSAGE = "Correct! Well done!"
ERROR_MESSAGE = "Not quite right. Try again or check the hints for help."


@dataclass
class Feedback:
    """Result of the last answer check."""

    kind: str  # "success" or "error"
    message: str
    hint: str | None = None

    @property
    def is_success(self) -> bool:
        return self.kind == "success"


@dataclass
class ExerciseState:
    """Local copy of one exercise's progress."""

    exercise_id: str
    completed: bool = False
    completed_steps: list[int] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "ExerciseState":
        return cls(
            exercise_id=data["exerciseId"],
            completed=bool(data.get("completed", False)),
            completed_steps=list(data.get("completedSteps") or []),
        )


class ModuleViewer:
    """Walks a learner through one catalog module and records progress."""

    def __init__(
        self,
        progress_client: ProgressClient,
        catalog: Catalog = TRAINING_CATALOG,
    ) -> None:
        self.client = progress_client
        self.catalog = catalog
        self._reset()

    def _reset(self) -> None:
        self.module: Module | None = None
        self.exercises: dict[str, ExerciseState] = {}
        self.progress = 0
        self.completed = False
        self.active_step = 0
        self.current_exercise_step = 0
        self.completed_steps: list[int] = []
        self.replayed_answers: list[str] = []
        self.user_answer = ""
        self.feedback: Feedback | None = None
        self.shown_hints: set[int] = set()
        self.exited = False
        self.exit_to: str | None = None

    # --------------------------------------------------------------------------
    # Derived state
    # --------------------------------------------------------------------------

    @property
    def on_content(self) -> bool:
        return self.active_step == 0

    @property
    def current_exercise(self) -> Exercise | None:
        if self.module is None or self.on_content:
            return None
        return self.module.exercises[self.active_step - 1]

    @property
    def can_advance(self) -> bool:
        """Whether ``next()`` is offered on the current page."""
        exercise = self.current_exercise
        if exercise is None:
            return self.module is not None
        if self.feedback is not None and self.feedback.is_success:
            return True
        if exercise.is_step_by_step:
            return self.current_exercise_step in self.completed_steps
        return self.exercises[exercise.id].completed

    def _recompute_progress(self) -> None:
        done = sum(1 for state in self.exercises.values() if state.completed)
        self.progress = completion_percent(done, len(self.exercises))
        self.completed = bool(self.exercises) and done == len(self.exercises)

    # --------------------------------------------------------------------------
    # Loading and resume
    # --------------------------------------------------------------------------

    async def load(self, module_id: str) -> bool:
        """Open a module, reconcile its progress and pick the resume position.

        Returns False for modules missing from the catalog.
        """
        self._reset()
        module = self.catalog.get(module_id)
        if module is None:
            logger.warning("module_not_found", module_id=module_id)
            return False
        self.module = module

        record = await self._fetch_progress(module_id)
        stored = {
            state.exercise_id: state
            for state in (
                ExerciseState.from_payload(e) for e in record.get("exercises", [])
            )
        }

        missing = [e.id for e in module.exercises if e.id not in stored]
        for exercise in module.exercises:
            self.exercises[exercise.id] = stored.get(
                exercise.id, ExerciseState(exercise_id=exercise.id)
            )
        for exercise_id in missing:
            await self._persist_exercise(
                exercise_id, completed=False, completed_steps=[]
            )

        self._recompute_progress()
        if record.get("completed"):
            self.progress, self.completed = 100, True

        with RequestContext(user_id=self.client.session.user_id, module_id=module_id):
            self._resume()
            logger.info(
                "resume_computed",
                progress=self.progress,
                active_step=self.active_step,
                exercise_step=self.current_exercise_step,
                synthesized=len(missing),
            )
        return True

    async def _fetch_progress(self, module_id: str) -> dict[str, Any]:
        try:
            return await self.client.get_module_progress(module_id)
        except httpx.HTTPError as e:
            logger.error("progress_fetch_failed", module_id=module_id, error=str(e))
            return {"moduleId": module_id, "progress": 0, "exercises": []}

    def _resume(self) -> None:
        if self.module is None:
            return
        if self.progress in (0, 100) or not self.module.exercises:
            self.active_step = 0
            return

        for index, exercise in enumerate(self.module.exercises):
            if not self.exercises[exercise.id].completed:
                self._enter_exercise(index + 1)
                return
        self.active_step = 0

    def _enter_exercise(self, active_step: int) -> None:
        """Show an exercise page, resuming a partly done step-by-step exercise."""
        self.active_step = active_step
        self.user_answer = ""
        self.feedback = None
        self.shown_hints = set()
        self.current_exercise_step = 0
        self.completed_steps = []
        self.replayed_answers = []

        exercise = self.current_exercise
        if exercise is None or not exercise.is_step_by_step:
            return

        state = self.exercises[exercise.id]
        self.completed_steps = sorted(set(state.completed_steps))
        if state.completed or not self.completed_steps:
            return

        self.current_exercise_step = min(
            max(self.completed_steps) + 1, exercise.step_count - 1
        )
        self.replayed_answers = [
            exercise.steps[i].solution
            for i in self.completed_steps
            if i < exercise.step_count
        ]

    # --------------------------------------------------------------------------
    # Answers
    # --------------------------------------------------------------------------

    def set_answer(self, answer: str) -> None:
        self.user_answer = answer

    def toggle_hint(self, index: int) -> None:
        self.shown_hints ^= {index}

    async def submit_answer(self) -> bool:
        """Check the answer of a single-answer exercise."""
        exercise = self.current_exercise
        if exercise is None:
            return False
        if exercise.is_step_by_step:
            return await self.submit_step()

        if self.user_answer.strip() != exercise.solution.strip():
            self.feedback = Feedback("error", ERROR_MESSAGE)
            return False

        self.feedback = Feedback("success", SUCCESS_MESSAGE)
        self.exercises[exercise.id].completed = True
        self._recompute_progress()
        await self._persist_exercise(exercise.id, completed=True)
        return True

    async def submit_step(self) -> bool:
        """Check the answer for the current step of a step-by-step exercise."""
        exercise = self.current_exercise
        if exercise is None or not exercise.is_step_by_step:
            return False

        step = exercise.steps[self.current_exercise_step]
        if self.user_answer.strip() != step.solution.strip():
            self.feedback = Feedback(
                "error",
                ERROR_MESSAGE,
                hint=f"Expected command: {step.solution}",
            )
            return False

        if self.current_exercise_step not in self.completed_steps:
            self.completed_steps.append(self.current_exercise_step)
            self.completed_steps.sort()
        is_final_step = self.current_exercise_step == exercise.step_count - 1

        state = self.exercises[exercise.id]
        state.completed_steps = list(self.completed_steps)
        if is_final_step:
            state.completed = True
            self._recompute_progress()

        self.feedback = Feedback("success", SUCCESS_MESSAGE)
        await self._persist_exercise(
            exercise.id,
            completed=is_final_step,
            completed_steps=list(self.completed_steps),
        )
        return True

    async def _persist_exercise(
        self,
        exercise_id: str,
        completed: bool | None = None,
        completed_steps: list[int] | None = None,
    ) -> None:
        if self.module is None:
            return
        try:
            await self.client.update_exercise_progress(
                self.module.id,
                exercise_id,
                completed=completed,
                completed_steps=completed_steps,
            )
        except httpx.HTTPError as e:
            logger.error(
                "exercise_progress_update_failed",
                module_id=self.module.id,
                exercise_id=exercise_id,
                error=str(e),
            )

    # --------------------------------------------------------------------------
    # Navigation
    # --------------------------------------------------------------------------

    async def next(self) -> None:
        """Advance to the next step, exercise, or finish the module."""
        if self.module is None or self.exited:
            return

        exercise = self.current_exercise
        if (
            exercise is not None
            and exercise.is_step_by_step
            and self.current_exercise_step < exercise.step_count - 1
        ):
            self.current_exercise_step += 1
            self.user_answer = ""
            self.feedback = None
            return

        if self.active_step < len(self.module.exercises):
            self._enter_exercise(self.active_step + 1)
            return

        await self.complete_module()

    def back(self) -> None:
        """Previous page, or back to the module list from the content page."""
        if self.module is None:
            return
        if self.on_content:
            self.exited = True
            self.exit_to = None
            return
        self._enter_exercise(self.active_step - 1)

    async def complete_module(self) -> Module | None:
        """Mark the module done and choose where to go next.

        Returns the next module, or None for the module list.
        """
        if self.module is None:
            return None

        try:
            await self.client.update_module_progress(
                self.module.id, completed=True, progress=100
            )
        except httpx.HTTPError as e:
            logger.error(
                "module_completion_failed",
                module_id=self.module.id,
                error=str(e),
            )

        self.progress, self.completed = 100, True
        destination = self.catalog.next_module(self.module.id)
        self.exited = True
        self.exit_to = destination.id if destination else None
        logger.info(
            "module_completed",
            module_id=self.module.id,
            next_module=self.exit_to,
        )
        return destination
