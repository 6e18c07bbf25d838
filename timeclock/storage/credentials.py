from __future__ import annotations

from .backends import KeyValueStorage


class CredentialStore:
    """Persist the single bearer token under one storage key."""

    def __init__(self, storage: KeyValueStorage, key: str) -> None:
        self.storage = storage
        self.key = key

    async def read(self) -> str | None:
        value = await self.storage.get(self.key)
        return value or None

    async def write(self, token: str) -> None:
        await self.storage.set(self.key, token)

    async def delete(self) -> None:
        await self.storage.remove(self.key)
