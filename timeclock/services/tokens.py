from __future__ import annotations

import logging

from ..core.errors import StorageError
from ..storage.credentials import CredentialStore

logger = logging.getLogger(__name__)


class TokenManager:
    """Owns the in-memory bearer token and keeps it in sync with durable storage.

    Memory is the source of truth for the running process: storage failures are
    logged and never reach the caller, and ``save``/``clear`` always update the
    in-memory copy even when the durable write does not go through.
    """

    def __init__(self, store: CredentialStore) -> None:
        self.store = store
        self._token: str | None = None

    def current(self) -> str | None:
        return self._token

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def load(self) -> None:
        try:
            token = await self.store.read()
        except StorageError as exc:
            logger.error("Failed to load stored credential: %s", exc)
            return
        if token:
            self._token = token
            logger.info("Stored credential loaded")
        else:
            logger.info("No stored credential found")

    async def save(self, token: str) -> None:
        try:
            await self.store.write(token)
        except StorageError as exc:
            logger.error("Failed to persist credential, keeping it in memory only: %s", exc)
        self._token = token

    async def clear(self) -> None:
        self._token = None
        try:
            await self.store.delete()
        except StorageError as exc:
            logger.error("Failed to remove stored credential: %s", exc)
