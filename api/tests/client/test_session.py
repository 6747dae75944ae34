"""Tests for the persisted learner session."""

from pathlib import Path

from gittrainer.client import SessionContext


USER = {"id": "5b1c...", "username": "octocat", "role": "student"}


def test_login_persists_and_load_restores(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "session.json"
    SessionContext(path).login("tok", USER)

    restored = SessionContext(path)
    assert restored.load() is True
    assert restored.token == "tok"
    assert restored.user == USER
    assert restored.auth_headers() == {"Authorization": "Bearer tok"}


def test_clear_removes_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    session = SessionContext(path)
    session.login("tok", USER)

    session.clear()

    assert not path.exists()
    assert session.token is None
    assert session.user is None
    assert session.auth_headers() == {}


def test_load_without_file(tmp_path: Path) -> None:
    assert SessionContext(tmp_path / "missing.json").load() is False


def test_corrupt_file_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_bytes(b"{not json")

    session = SessionContext(path)

    assert session.load() is False
    assert session.is_authenticated is False


def test_in_memory_session() -> None:
    session = SessionContext()
    session.login("tok", USER)
    assert session.user_id == USER["id"]

    session.clear()

    assert session.path is None
    assert session.is_authenticated is False
