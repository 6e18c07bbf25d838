from __future__ import annotations

import logging
from typing import Callable, List, Optional

from pydantic import ValidationError

from ..core.errors import TimeclockError
from ..core.logging import principal_ctx_var
from ..schemas.auth import AuthResponse, Identity, LoginRequest, RegisterRequest, Role
from .directory import LocalDirectory
from .http import ApiClient, unwrap
from .tokens import TokenManager
from .users import UserGateway

logger = logging.getLogger(__name__)


class AuthManager:
    """Login/logout orchestration and the single active identity.

    Failures never escape: every public operation reports a plain boolean.
    The offline directory is only consulted when ``offline_login_enabled`` is
    set, and then for any failed remote login, so a reachable server rejecting
    the password still lets a matching local account in.
    """

    def __init__(
        self,
        api: ApiClient,
        tokens: TokenManager,
        users: UserGateway,
        *,
        directory: Optional[LocalDirectory] = None,
        offline_login_enabled: bool = False,
    ) -> None:
        self.api = api
        self.tokens = tokens
        self.users = users
        self.directory = directory or LocalDirectory()
        self.offline_login_enabled = offline_login_enabled
        self._identity: Identity | None = None
        self._logout_hooks: List[Callable[[], None]] = []

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def current_user(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def is_admin(self) -> bool:
        return self._identity is not None and self._identity.role is Role.ADMIN

    def on_logout(self, hook: Callable[[], None]) -> None:
        """Register a synchronous callback run as soon as the identity is dropped."""

        self._logout_hooks.append(hook)

    def _set_identity(self, identity: Identity | None) -> None:
        self._identity = identity
        principal_ctx_var.set(f"user:{identity.id}" if identity else None)

    async def _authenticate(self, path: str, payload: dict) -> bool:
        try:
            response = await self.api.post(path, json=payload)
            auth = AuthResponse.model_validate(unwrap(response.data))
        except (TimeclockError, ValidationError) as exc:
            logger.warning("Remote authentication via %s failed: %s", path, exc)
            return False
        await self.tokens.save(auth.token)
        self._set_identity(auth.user)
        logger.info("Authenticated as user %s (%s)", auth.user.id, auth.user.role.value)
        return True

    async def login(self, email: str, password: str) -> bool:
        try:
            payload = LoginRequest(email=email, password=password)
        except ValidationError:
            logger.info("Login rejected locally: email and password are required")
            return False

        if await self._authenticate("/auth/login", payload.model_dump()):
            return True

        if not self.offline_login_enabled:
            return False
        identity = self.directory.authenticate(payload.email, payload.password)
        if identity is None:
            logger.info("Offline login failed for %s", payload.email)
            return False
        # Offline identities carry no credential.
        self._set_identity(identity)
        logger.warning("Authenticated user %s from the local directory (offline mode)", identity.id)
        return True

    async def register(self, name: str, email: str, password: str, role: Role | None = None) -> bool:
        return await self._register("/auth/register", name, email, password, role)

    async def register_admin(self, name: str, email: str, password: str) -> bool:
        return await self._register("/auth/register-admin", name, email, password, Role.ADMIN)

    async def _register(self, path: str, name: str, email: str, password: str, role: Role | None) -> bool:
        try:
            payload = RegisterRequest(name=name, email=email, password=password, role=role)
        except ValidationError:
            logger.info("Registration rejected locally: name, email and password are required")
            return False
        return await self._authenticate(path, payload.model_dump(mode="json", exclude_none=True))

    async def logout(self) -> None:
        had_credential = self.tokens.has_token
        self._set_identity(None)
        for hook in self._logout_hooks:
            hook()

        if had_credential:
            try:
                await self.api.post("/auth/logout")
            except TimeclockError as exc:
                logger.warning("Remote logout failed, clearing local state anyway: %s", exc)
        await self.tokens.clear()
        logger.info("Logged out")

    async def restore_from_stored_token(self) -> bool:
        if not self.tokens.has_token:
            return False
        try:
            profile = await self.users.me()
        except (TimeclockError, ValidationError) as exc:
            logger.warning("Stored credential could not be resolved, discarding it: %s", exc)
            await self.tokens.clear()
            self._set_identity(None)
            return False
        self._set_identity(Identity(id=profile.id, name=profile.name, email=profile.email, role=profile.role))
        logger.info("Restored session for user %s", profile.id)
        return True
