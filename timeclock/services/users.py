from __future__ import annotations

import logging
from typing import List

from ..core.errors import ApiError, TimeclockError
from ..schemas.auth import Role
from ..schemas.user import PasswordChange, User, UserCreate, UserStats, UserUpdate
from .http import ApiClient, unwrap

logger = logging.getLogger(__name__)


class UserGateway:
    """User-management endpoints. Everything except ``me`` requires an admin."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def me(self) -> User:
        response = await self.api.get("/users/me")
        return User.model_validate(unwrap(response.data))

    async def list(self) -> List[User]:
        response = await self.api.get("/users")
        payload = unwrap(response.data)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ApiError(status_code=response.status, message="Expected a list of users", details=response.data)
        return [User.model_validate(item) for item in payload]

    async def get(self, user_id: int | str) -> User:
        response = await self.api.get(f"/users/{user_id}")
        return User.model_validate(unwrap(response.data))

    async def create(self, payload: UserCreate) -> User:
        response = await self.api.post("/users", json=payload.model_dump(mode="json", exclude_none=True))
        user = User.model_validate(unwrap(response.data))
        logger.info("User %s created", user.id)
        return user

    async def update(self, user_id: int | str, payload: UserUpdate) -> User:
        response = await self.api.put(
            f"/users/{user_id}", json=payload.model_dump(mode="json", exclude_none=True)
        )
        return User.model_validate(unwrap(response.data))

    async def delete(self, user_id: int | str) -> None:
        await self.api.delete(f"/users/{user_id}")
        logger.info("User %s deleted", user_id)

    async def change_password(self, user_id: int | str, current_password: str, new_password: str) -> None:
        payload = PasswordChange(current_password=current_password, new_password=new_password)
        await self.api.put(f"/users/{user_id}/password", json=payload.model_dump(by_alias=True))

    async def stats(self, user_id: int | str) -> UserStats:
        response = await self.api.get(f"/users/{user_id}/stats")
        return UserStats.model_validate(unwrap(response.data))

    async def is_admin(self) -> bool:
        try:
            user = await self.me()
        except TimeclockError:
            return False
        return user.role is Role.ADMIN
