"""Tests for ModuleList."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from gittrainer.viewer import ModuleList
from gittrainer.viewer.module_list import LOAD_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_refresh_merges_progress_into_catalog() -> None:
    client = MagicMock()
    client.get_all_progress = AsyncMock(
        return_value=[
            {"moduleId": "git-basics", "progress": 100, "completed": True},
            {"moduleId": "branching-basics", "progress": 0, "completed": False},
            {"moduleId": "retired-module", "progress": 40, "completed": False},
        ]
    )
    module_list = ModuleList(client)

    entries = await module_list.refresh()

    by_id = {e.module.id: e for e in entries}
    assert list(by_id) == [
        "git-basics",
        "branching-basics",
        "advanced-merging",
        "git-flow",
    ]
    assert by_id["git-basics"].completed is True
    assert by_id["git-basics"].action_label == "Review Module"
    assert by_id["branching-basics"].prerequisites_met is True
    assert by_id["advanced-merging"].prerequisites_met is False
    assert by_id["git-flow"].progress == 0
    assert module_list.message is None


@pytest.mark.asyncio
async def test_failure_shows_transient_message() -> None:
    client = MagicMock()
    client.get_all_progress = AsyncMock(side_effect=httpx.ConnectError("down"))
    module_list = ModuleList(client)

    entries = await module_list.refresh()

    assert module_list.message == LOAD_FAILED_MESSAGE
    assert all(e.progress == 0 for e in entries)
    assert entries[0].action_label == "Start Module"

    module_list.dismiss_message()
    assert module_list.message is None
