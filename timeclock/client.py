"""Top-level wiring for the timeclock client.

This module is the glue between configuration, credential storage, the HTTP
client and the two stateful managers. Screens talk to a ``TimeclockClient``
and never construct the pieces themselves.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from .core.config import AppSettings, get_settings
from .core.logging import configure_logging
from .schemas.auth import Identity, Role
from .schemas.session import TimeRecord, WorkSession
from .services.auth import AuthManager
from .services.directory import LocalDirectory
from .services.http import ApiClient
from .services.reconciliation import SessionEngine
from .services.sessions import SessionGateway
from .services.tokens import TokenManager
from .services.users import UserGateway
from .storage.backends import KeyValueStorage, build_storage
from .storage.credentials import CredentialStore

logger = logging.getLogger(__name__)


class TimeclockClient:
    def __init__(
        self,
        *,
        tokens: TokenManager,
        api: ApiClient,
        auth: AuthManager,
        engine: SessionEngine,
        users: UserGateway,
    ) -> None:
        self.tokens = tokens
        self.api = api
        self.auth = auth
        self.engine = engine
        self.users = users
        # Dropping the identity drops its sessions in the same step.
        self.auth.on_logout(self.engine.reset)

    # ---- auth surface

    @property
    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated

    @property
    def is_admin(self) -> bool:
        return self.auth.is_admin

    @property
    def current_user(self) -> Identity | None:
        return self.auth.current_user

    async def login(self, email: str, password: str) -> bool:
        ok = await self.auth.login(email, password)
        if ok and self.tokens.has_token:
            await self.engine.refresh(force=True)
        return ok

    async def register(self, name: str, email: str, password: str, role: Role | None = None) -> bool:
        ok = await self.auth.register(name, email, password, role)
        if ok:
            await self.engine.refresh(force=True)
        return ok

    async def logout(self) -> None:
        await self.auth.logout()

    # ---- session surface

    @property
    def current_session(self) -> WorkSession | None:
        return self.engine.current_session

    @property
    def sessions(self) -> List[WorkSession]:
        return self.engine.sessions

    @property
    def loading(self) -> bool:
        return self.engine.loading

    async def start_session(self) -> bool:
        return await self.engine.start_session()

    async def end_session(self) -> bool:
        return await self.engine.end_session()

    async def start_pause(self) -> bool:
        return await self.engine.start_pause()

    async def end_pause(self) -> bool:
        return await self.engine.end_pause()

    async def refresh_sessions(self, force: bool = False) -> None:
        await self.engine.refresh(force)

    def get_today_records(self) -> List[TimeRecord]:
        return self.engine.get_today_records()

    def worked_seconds_today(self) -> float:
        return self.engine.worked_seconds_today()

    def clear_current_session(self) -> None:
        self.engine.clear_current_session()

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "TimeclockClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def build_client(
    app_settings: Optional[AppSettings] = None,
    *,
    storage: Optional[KeyValueStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    directory: Optional[LocalDirectory] = None,
) -> TimeclockClient:
    """Assemble the client, load the stored credential and restore the identity."""

    cfg = app_settings or get_settings()
    if cfg.LOG_CONFIGURE:
        configure_logging(cfg.LOG_LEVEL, cfg.LOG_JSON)
    tokens = TokenManager(CredentialStore(storage or build_storage(cfg), cfg.TOKEN_KEY))
    api = ApiClient(cfg.API_URL, tokens, timeout=cfg.API_TIMEOUT, transport=transport)
    users = UserGateway(api)
    auth = AuthManager(
        api,
        tokens,
        users,
        directory=directory,
        offline_login_enabled=cfg.OFFLINE_LOGIN_ENABLED,
    )
    engine = SessionEngine(SessionGateway(api), cache_window=cfg.SESSION_CACHE_SECONDS, tz=cfg.TZ)
    client = TimeclockClient(tokens=tokens, api=api, auth=auth, engine=engine, users=users)

    await tokens.load()
    if await auth.restore_from_stored_token():
        await engine.refresh()
    logger.info(
        "Client ready",
        extra={"extra_data": {"api_url": cfg.API_URL, "authenticated": auth.is_authenticated}},
    )
    return client
