from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .auth import Identity, Role


class User(Identity):
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Optional[Role] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword", min_length=1)

    model_config = {"populate_by_name": True}


class UserStats(BaseModel):
    total_sessions: int = Field(default=0, alias="totalSessions")
    total_hours: float = Field(default=0, alias="totalHours")
    average_session_duration: float = Field(default=0, alias="averageSessionDuration")
    last_session: Optional[datetime] = Field(default=None, alias="lastSession")

    model_config = {"populate_by_name": True, "extra": "ignore"}
