import asyncio

import httpx
import pytest

from timeclock.core.errors import (
    ApiError,
    NotFoundError,
    SessionAlreadyOpenError,
    TransportError,
    UnauthorizedError,
)
from timeclock.services.http import ApiClient, unwrap
from timeclock.services.tokens import TokenManager
from timeclock.storage.backends import MemoryStorage
from timeclock.storage.credentials import CredentialStore

TOKEN_KEY = "@PontoApp:token"


def _tokens(initial=None) -> tuple[TokenManager, MemoryStorage]:
    storage = MemoryStorage({TOKEN_KEY: initial} if initial else None)
    manager = TokenManager(CredentialStore(storage, TOKEN_KEY))
    asyncio.run(manager.load())
    return manager, storage


def test_authorization_header_tracks_current_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={"ok": True})

    tokens, _ = _tokens("first")

    async def scenario():
        async with ApiClient("http://api", tokens, transport=httpx.MockTransport(handler)) as api:
            await api.get("/users/me")
            await tokens.save("second")
            await api.get("/users/me")
            await tokens.clear()
            await api.get("/users/me")

    asyncio.run(scenario())

    assert seen == ["Bearer first", "Bearer second", None]


def test_unauthorized_response_clears_credential():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Token expired"})

    tokens, storage = _tokens("stale")

    async def scenario():
        async with ApiClient("http://api", tokens, transport=httpx.MockTransport(handler)) as api:
            await api.get("/sessions/my")

    with pytest.raises(UnauthorizedError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.message == "Token expired"
    assert tokens.current() is None
    assert asyncio.run(storage.get(TOKEN_KEY)) is None


def test_timeouts_become_transport_errors_and_keep_token():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    tokens, _ = _tokens("kept")

    async def scenario():
        async with ApiClient("http://api", tokens, transport=httpx.MockTransport(handler)) as api:
            await api.post("/sessions/start")

    with pytest.raises(TransportError):
        asyncio.run(scenario())
    assert tokens.current() == "kept"


@pytest.mark.parametrize(
    "status_code, body, expected",
    [
        (400, {"code": "SESSION_ALREADY_OPEN", "error": "Sessão já iniciada"}, SessionAlreadyOpenError),
        (409, {"code": "SESSION_ALREADY_OPEN"}, SessionAlreadyOpenError),
        (400, {"error": "Bad request"}, ApiError),
        (404, {"detail": "Session not found"}, NotFoundError),
        (500, "upstream exploded", ApiError),
    ],
)
def test_error_responses_map_to_typed_errors(status_code, body, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    tokens, _ = _tokens("token")

    async def scenario():
        async with ApiClient("http://api", tokens, transport=httpx.MockTransport(handler)) as api:
            await api.post("/sessions/start")

    with pytest.raises(expected) as excinfo:
        asyncio.run(scenario())
    assert type(excinfo.value) is expected
    assert excinfo.value.status_code == status_code
    assert tokens.current() == "token"


def test_empty_body_decodes_to_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    tokens, _ = _tokens()

    async def scenario():
        async with ApiClient("http://api", tokens, transport=httpx.MockTransport(handler)) as api:
            return await api.post("/auth/logout")

    response = asyncio.run(scenario())
    assert response.status == 204
    assert response.data is None


def test_unwrap_only_strips_data_envelopes():
    assert unwrap({"data": {"id": 7}}) == {"id": 7}
    assert unwrap({"data": [1, 2]}) == [1, 2]
    assert unwrap({"id": 7, "data": "note"}) == {"id": 7, "data": "note"}
    assert unwrap([{"id": 7}]) == [{"id": 7}]
