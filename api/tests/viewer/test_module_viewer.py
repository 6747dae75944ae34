"""Tests for the ModuleViewer state machine."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from gittrainer.auth.permissions import UserRole
from gittrainer.client import ProgressClient, SessionContext
from gittrainer.viewer import ERROR_MESSAGE, SUCCESS_MESSAGE, ModuleViewer


def exercise(exercise_id: str, completed: bool = False, steps=()) -> dict[str, Any]:
    return {
        "exerciseId": exercise_id,
        "completed": completed,
        "completedSteps": list(steps),
    }


def record(
    module_id: str,
    *exercises: dict[str, Any],
    completed: bool = False,
    progress: int = 0,
) -> dict[str, Any]:
    return {
        "moduleId": module_id,
        "completed": completed,
        "progress": progress,
        "exercises": list(exercises),
    }


def mock_client(payload: dict[str, Any] | None = None, fail: bool = False) -> MagicMock:
    client = MagicMock()
    client.session = SessionContext()
    error = httpx.ConnectError("connection refused") if fail else None
    client.get_module_progress = AsyncMock(return_value=payload, side_effect=error)
    client.update_exercise_progress = AsyncMock(return_value={}, side_effect=error)
    client.update_module_progress = AsyncMock(return_value={}, side_effect=error)
    return client


# ==============================================================================
# Loading and resume
# ==============================================================================


class TestLoad:
    @pytest.mark.asyncio
    async def test_unknown_module(self) -> None:
        viewer = ModuleViewer(mock_client(record("nope")))

        assert await viewer.load("nope") is False
        assert viewer.module is None

    @pytest.mark.asyncio
    async def test_fresh_module_starts_on_content_and_persists_entries(self) -> None:
        client = mock_client(record("git-basics"))
        viewer = ModuleViewer(client)

        assert await viewer.load("git-basics") is True

        assert viewer.on_content
        assert viewer.progress == 0
        assert list(viewer.exercises) == ["init-repo", "first-commit"]
        calls = client.update_exercise_progress.await_args_list
        assert [c.args for c in calls] == [
            ("git-basics", "init-repo"),
            ("git-basics", "first-commit"),
        ]
        assert all(
            c.kwargs == {"completed": False, "completed_steps": []} for c in calls
        )

    @pytest.mark.asyncio
    async def test_only_missing_entries_are_synthesized(self) -> None:
        client = mock_client(
            record("git-basics", exercise("init-repo", completed=True), progress=100)
        )
        viewer = ModuleViewer(client)

        await viewer.load("git-basics")

        client.update_exercise_progress.assert_awaited_once_with(
            "git-basics", "first-commit", completed=False, completed_steps=[]
        )
        # Resume progress comes from the reconciled list, not the stale 100
        assert viewer.progress == 50
        assert viewer.active_step == 2

    @pytest.mark.asyncio
    async def test_resume_at_second_exercise_step_one(self) -> None:
        client = mock_client(
            record(
                "git-basics",
                exercise("init-repo", completed=True, steps=[0, 1, 2]),
                exercise("first-commit", steps=[0]),
                progress=50,
            )
        )
        viewer = ModuleViewer(client)

        await viewer.load("git-basics")

        assert viewer.active_step == 2
        assert viewer.current_exercise.id == "first-commit"
        assert viewer.current_exercise_step == 1
        assert viewer.completed_steps == [0]
        assert viewer.replayed_answers == ['echo "# My Project" > README.md']
        client.update_exercise_progress.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resume_step_is_clamped_to_last_step(self) -> None:
        viewer = ModuleViewer(
            mock_client(
                record(
                    "git-basics",
                    exercise("init-repo", completed=True),
                    exercise("first-commit", steps=[0, 1, 2]),
                )
            )
        )

        await viewer.load("git-basics")

        assert viewer.current_exercise_step == 2

    @pytest.mark.asyncio
    async def test_completed_module_opens_in_review_mode(self) -> None:
        viewer = ModuleViewer(
            mock_client(
                record(
                    "branching-basics",
                    exercise("create-branch", completed=True),
                    completed=True,
                    progress=100,
                )
            )
        )

        await viewer.load("branching-basics")

        assert viewer.on_content
        assert viewer.progress == 100

    @pytest.mark.asyncio
    async def test_fetch_failure_falls_back_to_content(self) -> None:
        viewer = ModuleViewer(mock_client(fail=True))

        assert await viewer.load("git-basics") is True
        assert viewer.on_content
        assert viewer.progress == 0

    @pytest.mark.asyncio
    async def test_non_json_responses_are_swallowed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        client = ProgressClient(
            SessionContext(),
            base_url="http://api.test",
            transport=httpx.MockTransport(handler),
        )
        viewer = ModuleViewer(client)

        assert await viewer.load("branching-basics") is True
        assert viewer.on_content

        await viewer.next()
        viewer.set_answer("git checkout -b feature")
        assert await viewer.submit_answer() is True
        assert await viewer.complete_module() is not None

    @pytest.mark.asyncio
    async def test_reload_resets_local_state(self) -> None:
        viewer = ModuleViewer(mock_client(record("branching-basics")))
        await viewer.load("branching-basics")
        await viewer.next()
        viewer.set_answer("git status")
        await viewer.submit_answer()

        await viewer.load("branching-basics")

        assert viewer.on_content
        assert viewer.feedback is None
        assert viewer.user_answer == ""


# ==============================================================================
# Answers
# ==============================================================================


class TestSingleAnswer:
    @pytest_asyncio.fixture
    async def viewer(self) -> ModuleViewer:
        viewer = ModuleViewer(mock_client(record("branching-basics")))
        await viewer.load("branching-basics")
        await viewer.next()
        viewer.client.update_exercise_progress.reset_mock()
        return viewer

    @pytest.mark.asyncio
    async def test_correct_answer_is_trimmed_and_persisted(
        self, viewer: ModuleViewer
    ) -> None:
        viewer.set_answer("  git checkout -b feature \n")

        assert await viewer.submit_answer() is True

        assert viewer.feedback.message == SUCCESS_MESSAGE
        assert viewer.can_advance
        assert viewer.exercises["create-branch"].completed
        assert viewer.progress == 100
        viewer.client.update_exercise_progress.assert_awaited_once_with(
            "branching-basics", "create-branch", completed=True, completed_steps=None
        )

    @pytest.mark.asyncio
    async def test_wrong_answer_changes_nothing(self, viewer: ModuleViewer) -> None:
        viewer.set_answer("git branch feature")

        assert await viewer.submit_answer() is False

        assert viewer.feedback.message == ERROR_MESSAGE
        assert viewer.feedback.hint is None
        assert not viewer.can_advance
        assert not viewer.exercises["create-branch"].completed
        viewer.client.update_exercise_progress.assert_not_awaited()


class TestStepByStep:
    @pytest_asyncio.fixture
    async def viewer(self) -> ModuleViewer:
        viewer = ModuleViewer(mock_client(record("git-basics")))
        await viewer.load("git-basics")
        await viewer.next()
        viewer.client.update_exercise_progress.reset_mock()
        return viewer

    @pytest.mark.asyncio
    async def test_wrong_step_reveals_expected_command(
        self, viewer: ModuleViewer
    ) -> None:
        viewer.set_answer("mkdir project")

        assert await viewer.submit_step() is False

        assert viewer.feedback.hint == "Expected command: mkdir my-project"
        assert viewer.completed_steps == []

    @pytest.mark.asyncio
    async def test_steps_accumulate_and_final_step_completes(
        self, viewer: ModuleViewer
    ) -> None:
        for answer in ("mkdir my-project", "cd my-project", "git init"):
            viewer.set_answer(answer)
            assert await viewer.submit_step() is True
            await viewer.next()

        calls = viewer.client.update_exercise_progress.await_args_list
        assert [c.kwargs for c in calls] == [
            {"completed": False, "completed_steps": [0]},
            {"completed": False, "completed_steps": [0, 1]},
            {"completed": True, "completed_steps": [0, 1, 2]},
        ]
        assert viewer.exercises["init-repo"].completed
        assert viewer.progress == 50
        assert viewer.current_exercise.id == "first-commit"
        assert viewer.current_exercise_step == 0

    @pytest.mark.asyncio
    async def test_submit_answer_routes_to_step_check(
        self, viewer: ModuleViewer
    ) -> None:
        viewer.set_answer("mkdir my-project")

        assert await viewer.submit_answer() is True
        assert viewer.completed_steps == [0]


# ==============================================================================
# Navigation
# ==============================================================================


class TestNavigation:
    @pytest.mark.asyncio
    async def test_back_from_content_goes_home(self) -> None:
        viewer = ModuleViewer(mock_client(record("git-basics")))
        await viewer.load("git-basics")

        viewer.back()

        assert viewer.exited
        assert viewer.exit_to is None

    @pytest.mark.asyncio
    async def test_back_returns_to_previous_exercise(self) -> None:
        viewer = ModuleViewer(mock_client(record("git-flow")))
        await viewer.load("git-flow")
        await viewer.next()
        await viewer.next()
        assert viewer.active_step == 2

        viewer.back()

        assert viewer.active_step == 1
        assert viewer.feedback is None

    @pytest.mark.asyncio
    async def test_next_past_last_exercise_completes_module(self) -> None:
        client = mock_client(record("branching-basics"))
        viewer = ModuleViewer(client)
        await viewer.load("branching-basics")
        await viewer.next()
        viewer.set_answer("git checkout -b feature")
        await viewer.submit_answer()

        await viewer.next()

        client.update_module_progress.assert_awaited_once_with(
            "branching-basics", completed=True, progress=100
        )
        assert viewer.exited
        assert viewer.exit_to == "advanced-merging"

    @pytest.mark.asyncio
    async def test_last_module_goes_home(self) -> None:
        viewer = ModuleViewer(mock_client(record("git-flow")))
        await viewer.load("git-flow")

        destination = await viewer.complete_module()

        assert destination is None
        assert viewer.exit_to is None

    @pytest.mark.asyncio
    async def test_failures_are_swallowed(self) -> None:
        viewer = ModuleViewer(mock_client(fail=True))
        await viewer.load("branching-basics")
        await viewer.next()
        viewer.set_answer("git checkout -b feature")

        assert await viewer.submit_answer() is True
        await viewer.next()

        assert viewer.completed
        assert viewer.exit_to == "advanced-merging"


# ==============================================================================
# End to end against the API
# ==============================================================================


@pytest.mark.asyncio
async def test_walkthrough_against_api(app, make_token) -> None:
    session = SessionContext()
    session.token = make_token(UserRole.STUDENT)
    client = ProgressClient(
        session,
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=app),
    )
    viewer = ModuleViewer(client)

    await viewer.load("git-basics")
    stored = await client.get_module_progress("git-basics")
    assert [e["exerciseId"] for e in stored["exercises"]] == [
        "init-repo",
        "first-commit",
    ]

    await viewer.next()
    for answer in (
        "mkdir my-project",
        "cd my-project",
        "git init",
        'echo "# My Project" > README.md',
        "git add README.md",
    ):
        viewer.set_answer(answer)
        assert await viewer.submit_step() is True
        await viewer.next()

    resumed = ModuleViewer(client)
    await resumed.load("git-basics")
    assert resumed.current_exercise.id == "first-commit"
    assert resumed.current_exercise_step == 2

    resumed.set_answer('git commit -m "Initial commit"')
    assert await resumed.submit_step() is True
    stored = await client.get_module_progress("git-basics")
    assert stored["progress"] == 100
    assert stored["completed"] is True

    await resumed.next()
    assert resumed.exit_to == "branching-basics"
