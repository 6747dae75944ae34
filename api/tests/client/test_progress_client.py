"""Tests for ProgressClient using httpx.MockTransport."""

import httpx
import orjson
import pytest

from gittrainer.client import ProgressClient, SessionContext


@pytest.fixture
def session() -> SessionContext:
    session = SessionContext()
    session.token = "secret-token"
    session.user = {"id": "u1"}
    return session


def make_client(session: SessionContext, handler) -> ProgressClient:
    return ProgressClient(
        session,
        base_url="http://api.test",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_all_progress_sends_bearer(session: SessionContext) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"moduleId": "git-basics", "progress": 50}])

    result = await make_client(session, handler).get_all_progress()

    assert result == [{"moduleId": "git-basics", "progress": 50}]
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/progress"
    assert seen[0].headers["Authorization"] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_update_exercise_sends_camel_case(session: SessionContext) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(orjson.loads(request.content))
        return httpx.Response(200, json={"moduleId": "git-basics"})

    client = make_client(session, handler)
    await client.update_exercise_progress(
        "git-basics", "init-repo", completed=False, completed_steps=[0]
    )
    await client.update_exercise_progress("git-basics", "init-repo")

    assert bodies == [{"completed": False, "completedSteps": [0]}, {}]


@pytest.mark.asyncio
async def test_update_module_path_and_body(session: SessionContext) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    await make_client(session, handler).update_module_progress(
        "git-flow", completed=True, progress=100
    )

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/progress/module/git-flow"
    assert orjson.loads(seen[0].content) == {"completed": True, "progress": 100}


@pytest.mark.asyncio
async def test_http_errors_propagate(session: SessionContext) -> None:
    client = make_client(session, lambda request: httpx.Response(500, json={}))

    with pytest.raises(httpx.HTTPStatusError):
        await client.get_module_progress("git-basics")


@pytest.mark.asyncio
async def test_transport_errors_propagate(session: SessionContext) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(httpx.HTTPError):
        await make_client(session, handler).get_all_progress()


@pytest.mark.asyncio
async def test_non_json_body_raises_decoding_error(session: SessionContext) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(httpx.DecodingError):
        await make_client(session, handler).get_module_progress("git-basics")
