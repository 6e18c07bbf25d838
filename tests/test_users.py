import asyncio

import pytest

from fake_api import BASE_URL
from timeclock.core.errors import ApiError, NotFoundError
from timeclock.schemas.auth import Role
from timeclock.schemas.user import UserCreate, UserUpdate
from timeclock.services.http import ApiClient
from timeclock.services.tokens import TokenManager
from timeclock.services.users import UserGateway
from timeclock.storage.backends import MemoryStorage
from timeclock.storage.credentials import CredentialStore

TOKEN_KEY = "@PontoApp:token"


def run_as(server, transport, user_id, scenario):
    async def wrapper():
        tokens = TokenManager(CredentialStore(MemoryStorage(), TOKEN_KEY))
        if user_id is not None:
            await tokens.save(server.issue_token(user_id))
        async with ApiClient(BASE_URL, tokens, transport=transport) as api:
            return await scenario(UserGateway(api))

    return asyncio.run(wrapper())


def test_admin_manages_users(server, transport):
    async def scenario(users):
        created = await users.create(UserCreate(name="Maria Santos", email="maria@empresa.com", password="123456"))
        renamed = await users.update(created.id, UserUpdate(name="Maria S. Santos"))
        listed = await users.list()
        fetched = await users.get(created.id)
        await users.delete(created.id)
        return created, renamed, listed, fetched

    created, renamed, listed, fetched = run_as(server, transport, 1, scenario)

    assert created.role is Role.USER
    assert renamed.name == "Maria S. Santos"
    assert {user.email for user in listed} >= {"admin@pontoapp.com", "maria@empresa.com"}
    assert fetched.created_at is not None
    assert int(created.id) not in server.users


def test_missing_user_raises_not_found(server, transport):
    async def scenario(users):
        await users.get(999)

    with pytest.raises(NotFoundError):
        run_as(server, transport, 1, scenario)


def test_regular_user_is_not_admin_and_cannot_list(server, transport):
    async def scenario(users):
        assert await users.is_admin() is False
        await users.list()

    with pytest.raises(ApiError) as excinfo:
        run_as(server, transport, 2, scenario)
    assert excinfo.value.status_code == 403


def test_is_admin_is_false_without_credential(server, transport):
    async def scenario(users):
        return await users.is_admin()

    assert run_as(server, transport, None, scenario) is False


def test_change_password_and_stats(server, transport):
    async def scenario(users):
        await users.change_password(2, "123456", "novaSenha")
        return await users.me()

    me = run_as(server, transport, 2, scenario)
    assert me.email == "joao@empresa.com"
    assert server.users[2]["password"] == "novaSenha"

    async def stats(users):
        return await users.stats(2)

    result = run_as(server, transport, 1, stats)
    assert result.total_sessions == 0
    assert result.last_session is None
