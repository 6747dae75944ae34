"""Tests for ProgressService against the in-memory session."""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from gittrainer.progress.service import ProgressConflictError, ProgressService


@pytest.fixture
def service(fake_session) -> ProgressService:
    return ProgressService(session=fake_session, keyspace="test_keyspace")


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


class TestReads:
    @pytest.mark.asyncio
    async def test_missing_module_returns_unsaved_placeholder(
        self, service: ProgressService, fake_session, user_id: UUID
    ) -> None:
        record = await service.get_module_progress(user_id, "git-basics")

        assert record.is_new
        assert record.progress == 0
        assert record.exercises == []
        assert fake_session.rows("module_progress") == []

    @pytest.mark.asyncio
    async def test_list_progress_is_scoped_to_user(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        await service.update_module_progress(user_id, "git-basics", progress=10)
        await service.update_module_progress(user_id, "git-flow", progress=20)
        await service.update_module_progress(uuid4(), "git-basics", progress=30)

        records = await service.list_progress(user_id)

        assert sorted(r.module_id for r in records) == ["git-basics", "git-flow"]

    @pytest.mark.asyncio
    async def test_list_progress_empty(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        assert await service.list_progress(user_id) == []


class TestModuleUpdates:
    @pytest.mark.asyncio
    async def test_double_upsert_keeps_one_record(
        self, service: ProgressService, fake_session, user_id: UUID
    ) -> None:
        await service.update_module_progress(user_id, "git-basics", progress=10)
        record = await service.update_module_progress(
            user_id, "git-basics", completed=True, progress=100
        )

        assert len(fake_session.rows("module_progress")) == 1
        assert record.progress == 100
        assert record.completed is True
        assert record.completed_at is not None
        assert record.version == 2

    @pytest.mark.asyncio
    async def test_omitted_fields_reset_on_write(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        await service.update_module_progress(
            user_id, "m", completed=True, progress=100
        )

        record = await service.update_module_progress(user_id, "m", progress=40)
        assert record.completed is False
        assert record.progress == 40

        record = await service.update_module_progress(user_id, "m")
        assert record.completed is False
        assert record.progress == 0
        assert record.completed_at is None

    @pytest.mark.asyncio
    async def test_completion_can_be_reverted(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        await service.update_module_progress(user_id, "git-basics", completed=True)
        record = await service.update_module_progress(
            user_id, "git-basics", completed=False
        )

        assert record.completed is False
        assert record.completed_at is None


class TestExerciseUpdates:
    @pytest.mark.asyncio
    async def test_two_exercises_fifty_then_hundred(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        await service.update_exercise_progress(user_id, "m", "a")
        await service.update_exercise_progress(user_id, "m", "b")

        record = await service.update_exercise_progress(
            user_id, "m", "a", completed=True
        )
        assert record.progress == 50
        assert record.completed is False

        record = await service.update_exercise_progress(
            user_id, "m", "b", completed=True
        )
        assert record.progress == 100
        assert record.completed is True

        stored = await service.get_module_progress(user_id, "m")
        assert stored.progress == 100
        assert [e.completed for e in stored.exercises] == [True, True]

    @pytest.mark.asyncio
    async def test_unknown_exercise_creates_entry(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        record = await service.update_exercise_progress(
            user_id, "git-basics", "not-in-any-catalog", completed_steps=[0]
        )

        assert record.exercises[0].exercise_id == "not-in-any-catalog"
        assert record.exercises[0].completed_steps == [0]
        assert record.progress == 0

    @pytest.mark.asyncio
    async def test_final_step_completes_module(
        self, service: ProgressService, user_id: UUID
    ) -> None:
        await service.update_exercise_progress(
            user_id,
            "git-basics",
            "init-repo",
            completed=True,
            completed_steps=[0, 1, 2],
        )
        await service.update_exercise_progress(
            user_id, "git-basics", "first-commit", completed_steps=[0, 1]
        )

        record = await service.update_exercise_progress(
            user_id,
            "git-basics",
            "first-commit",
            completed=True,
            completed_steps=[0, 1, 2],
        )

        assert record.progress == 100
        assert record.completed is True
        assert record.completed_at is not None


class TestConditionalWrites:
    @staticmethod
    def _session(applied: list[bool]) -> MagicMock:
        session = MagicMock()
        session.prepare = MagicMock(side_effect=lambda cql: cql)
        missing = MagicMock()
        missing.one.return_value = None

        async def aexecute(statement, params):
            if statement.strip().startswith("SELECT"):
                return missing
            result = MagicMock()
            result.was_applied = applied.pop(0)
            return result

        session.aexecute = AsyncMock(side_effect=aexecute)
        return session

    @pytest.mark.asyncio
    async def test_lost_write_is_retried(self, user_id: UUID) -> None:
        session = self._session([False, True])
        service = ProgressService(session, "ks", max_write_attempts=3)

        record = await service.update_module_progress(user_id, "m", progress=50)

        assert record.progress == 50
        assert record.version == 1
        inserts = [
            c for c in session.aexecute.call_args_list if "INSERT" in c.args[0]
        ]
        assert len(inserts) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, user_id: UUID) -> None:
        session = self._session([False, False])
        service = ProgressService(session, "ks", max_write_attempts=2)

        with pytest.raises(ProgressConflictError) as exc_info:
            await service.update_exercise_progress(user_id, "m", "a", completed=True)

        assert exc_info.value.code == "progress_conflict"

    @pytest.mark.asyncio
    async def test_concurrent_writer_is_not_overwritten(
        self, service: ProgressService, fake_session, user_id: UUID
    ) -> None:
        await service.update_exercise_progress(user_id, "m", "a")
        stale = await service.get_record(user_id, "m")

        await service.update_exercise_progress(user_id, "m", "b", completed=True)

        stale.apply_exercise_update("a", completed=True)
        assert await service._save(stale) is False

        record = await service.update_exercise_progress(
            user_id, "m", "a", completed=True
        )
        assert [e.exercise_id for e in record.exercises] == ["a", "b"]
        assert record.completed is True
