"""Shared fixtures.

Services run against ``FakeCassandraSession``, an in-memory stand-in that
understands the handful of CQL shapes the services prepare (single-table
SELECT/INSERT/UPDATE/DELETE with equality predicates and LWT conditions).
"""

import copy
import os
import re
from types import SimpleNamespace
from typing import Any
from uuid import uuid4


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("CASSANDRA_KEYSPACE", "gittrainer_test")

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from gittrainer.auth.permissions import UserRole  # noqa: E402
from gittrainer.auth.security import create_access_token  # noqa: E402


# ==============================================================================
# In-memory Cassandra session
# ==============================================================================

TABLE_KEYS: dict[str, tuple[str, ...]] = {
    "users": ("id",),
    "tutorials": ("id",),
    "module_progress": ("user_id", "module_id"),
}

_TABLE = r"(?:\w+\.)?(\w+)"
_SELECT = re.compile(rf"^SELECT \* FROM {_TABLE}(?: WHERE (.+))?$")
_INSERT = re.compile(
    rf"^INSERT INTO {_TABLE} \((.+?)\) VALUES \((.+?)\)( IF NOT EXISTS)?$"
)
_UPDATE = re.compile(rf"^UPDATE {_TABLE} SET (.+?) WHERE (.+?)(?: IF (\w+) = \?)?$")
_DELETE = re.compile(rf"^DELETE FROM {_TABLE} WHERE (.+)$")


def _columns(clause: str, separator: str) -> list[str]:
    return [part.split("=")[0].strip() for part in clause.split(separator)]


class FakeStatement:
    """Parsed prepared statement."""

    def __init__(self, cql: str):
        self.cql = " ".join(cql.split())
        self.kind = self.cql.split(" ", 1)[0].upper()
        self.if_not_exists = False
        self.condition: str | None = None
        self.set_columns: list[str] = []
        self.where: list[str] = []

        if match := _SELECT.match(self.cql):
            self.table = match.group(1)
            self.where = _columns(match.group(2), " AND ") if match.group(2) else []
        elif match := _INSERT.match(self.cql):
            self.table = match.group(1)
            self.set_columns = [c.strip() for c in match.group(2).split(",")]
            self.if_not_exists = bool(match.group(4))
        elif match := _UPDATE.match(self.cql):
            self.table = match.group(1)
            self.set_columns = _columns(match.group(2), ",")
            self.where = _columns(match.group(3), " AND ")
            self.condition = match.group(4)
        elif match := _DELETE.match(self.cql):
            self.table = match.group(1)
            self.where = _columns(match.group(2), " AND ")
        else:
            msg = f"Unsupported CQL in fake session: {self.cql}"
            raise ValueError(msg)


class FakeResult:
    """Mimics the driver's ResultSet: iterable, ``one()`` and ``was_applied``."""

    def __init__(self, rows: list[dict[str, Any]], was_applied: bool = True):
        self._rows = [SimpleNamespace(**copy.deepcopy(row)) for row in rows]
        self.was_applied = was_applied

    def one(self) -> SimpleNamespace | None:
        return self._rows[0] if self._rows else None

    def __iter__(self):
        return iter(self._rows)


class FakeCassandraSession:
    """Dict-backed session supporting ``prepare`` and ``aexecute``."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[tuple, dict[str, Any]]] = {
            name: {} for name in TABLE_KEYS
        }
        self.executed: list[FakeStatement] = []

    def prepare(self, cql: str) -> FakeStatement:
        return FakeStatement(cql)

    def rows(self, table: str) -> list[dict[str, Any]]:
        return list(self.tables[table].values())

    async def aexecute(self, statement: FakeStatement, params=None) -> FakeResult:
        params = list(params or [])
        self.executed.append(statement)
        table = self.tables[statement.table]
        keys = TABLE_KEYS[statement.table]

        if statement.kind == "SELECT":
            criteria = dict(zip(statement.where, params, strict=True))
            return FakeResult(
                [
                    row
                    for row in table.values()
                    if all(row.get(col) == value for col, value in criteria.items())
                ]
            )

        if statement.kind == "INSERT":
            row = dict(zip(statement.set_columns, params, strict=True))
            key = tuple(row[k] for k in keys)
            if statement.if_not_exists and key in table:
                return FakeResult([], was_applied=False)
            table[key] = copy.deepcopy(row)
            return FakeResult([])

        if statement.kind == "UPDATE":
            n_set = len(statement.set_columns)
            values = dict(zip(statement.set_columns, params[:n_set], strict=True))
            where = dict(
                zip(statement.where, params[n_set : n_set + len(keys)], strict=True)
            )
            key = tuple(where[k] for k in keys)
            existing = table.get(key)
            if statement.condition is not None:
                expected = params[n_set + len(keys)]
                if existing is None or existing.get(statement.condition) != expected:
                    return FakeResult([], was_applied=False)
            row = existing if existing is not None else dict(where)
            row.update(copy.deepcopy(values))
            table[key] = row
            return FakeResult([])

        where = dict(zip(statement.where, params, strict=True))
        table.pop(tuple(where[k] for k in keys), None)
        return FakeResult([])


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def fake_session() -> FakeCassandraSession:
    """Fresh in-memory Cassandra session."""
    return FakeCassandraSession()


@pytest.fixture
def app(fake_session: FakeCassandraSession) -> FastAPI:
    """Application wired to the in-memory session (lifespan not run)."""
    from gittrainer.main import create_app, init_services

    application = create_app()
    init_services(application, fake_session)
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client that turns unhandled errors into 500 responses."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def make_token():
    """Factory for access tokens carrying the usual claims."""

    def _make(role: UserRole = UserRole.STUDENT, user_id: str | None = None) -> str:
        uid = user_id or str(uuid4())
        return create_access_token(
            {
                "sub": uid,
                "email": f"{role.value}_{uid[:8]}@example.com",
                "username": f"{role.value}_{uid[:8]}",
                "role": role.value,
            }
        )

    return _make


@pytest.fixture
def student_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(UserRole.STUDENT)}"}


@pytest.fixture
def lecturer_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(UserRole.LECTURER)}"}


@pytest.fixture
def admin_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(UserRole.ADMIN)}"}
