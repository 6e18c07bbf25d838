import asyncio

from timeclock.core.errors import StorageError
from timeclock.services.tokens import TokenManager
from timeclock.storage.backends import MemoryStorage
from timeclock.storage.credentials import CredentialStore

TOKEN_KEY = "@PontoApp:token"


class BrokenStorage:
    async def get(self, key):
        raise StorageError("read failed")

    async def set(self, key, value):
        raise StorageError("write failed")

    async def remove(self, key):
        raise StorageError("remove failed")


def _manager(storage) -> TokenManager:
    return TokenManager(CredentialStore(storage, TOKEN_KEY))


def test_load_reads_persisted_token():
    manager = _manager(MemoryStorage({TOKEN_KEY: "persisted"}))

    asyncio.run(manager.load())

    assert manager.current() == "persisted"
    assert manager.has_token


def test_load_without_token_is_a_noop():
    manager = _manager(MemoryStorage())

    asyncio.run(manager.load())

    assert manager.current() is None


def test_save_and_clear_round_through_storage():
    storage = MemoryStorage()
    manager = _manager(storage)

    asyncio.run(manager.save("fresh"))
    assert manager.current() == "fresh"
    assert asyncio.run(storage.get(TOKEN_KEY)) == "fresh"

    asyncio.run(manager.clear())
    assert manager.current() is None
    assert asyncio.run(storage.get(TOKEN_KEY)) is None


def test_storage_failures_never_reach_the_caller():
    manager = _manager(BrokenStorage())

    asyncio.run(manager.load())
    assert manager.current() is None

    asyncio.run(manager.save("memory-only"))
    assert manager.current() == "memory-only"

    asyncio.run(manager.clear())
    assert manager.current() is None
