import asyncio

import pytest

from timeclock.core.errors import StorageError
from timeclock.storage.backends import JsonFileStorage, MemoryStorage, SqlStorage, build_storage
from timeclock.storage.credentials import CredentialStore

TOKEN_KEY = "@PontoApp:token"


def test_json_file_storage_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "storage.json"

    async def scenario():
        await JsonFileStorage(path).set(TOKEN_KEY, "abc")
        reopened = JsonFileStorage(path)
        assert await reopened.get(TOKEN_KEY) == "abc"
        await reopened.remove(TOKEN_KEY)
        assert await JsonFileStorage(path).get(TOKEN_KEY) is None

    asyncio.run(scenario())
    assert path.exists()


def test_json_file_storage_keeps_other_keys(tmp_path):
    storage = JsonFileStorage(tmp_path / "storage.json")

    async def scenario():
        await storage.set("theme", "dark")
        await storage.set(TOKEN_KEY, "abc")
        await storage.remove(TOKEN_KEY)
        return await storage.get("theme")

    assert asyncio.run(scenario()) == "dark"


def test_json_file_storage_raises_storage_error_on_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        asyncio.run(JsonFileStorage(path).get(TOKEN_KEY))


def test_sql_storage_upserts_single_key(tmp_path):
    url = f"sqlite:///{tmp_path / 'kv.db'}"

    async def scenario():
        storage = SqlStorage(url)
        await storage.set(TOKEN_KEY, "first")
        await storage.set(TOKEN_KEY, "second")
        value = await SqlStorage(url).get(TOKEN_KEY)
        await storage.remove(TOKEN_KEY)
        await storage.remove(TOKEN_KEY)
        return value, await storage.get(TOKEN_KEY)

    assert asyncio.run(scenario()) == ("second", None)


def test_credential_store_treats_empty_value_as_missing():
    store = CredentialStore(MemoryStorage({TOKEN_KEY: ""}), TOKEN_KEY)

    assert asyncio.run(store.read()) is None


def test_build_storage_selects_backend(app_settings):
    assert isinstance(build_storage(app_settings), MemoryStorage)
    assert isinstance(build_storage(app_settings.model_copy(update={"STORAGE_BACKEND": "file"})), JsonFileStorage)
    assert isinstance(build_storage(app_settings.model_copy(update={"STORAGE_BACKEND": "sql"})), SqlStorage)
