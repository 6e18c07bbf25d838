from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {"email": "joao@empresa.com", "password": "123456"}
        },
    }


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Role | None = None


class Identity(BaseModel):
    """The resolved user behind the active credential."""

    id: str
    name: str
    email: str
    role: Role = Role.USER

    model_config = {"extra": "ignore"}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: object) -> str:
        # The service returns numeric ids from /users/me and strings from /auth/login.
        return str(value)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class AuthResponse(BaseModel):
    token: str = Field(..., min_length=1)
    user: Identity

    model_config = {
        "json_schema_extra": {
            "example": {
                "token": "<jwt>",
                "user": {"id": "2", "name": "João Silva", "email": "joao@empresa.com", "role": "USER"},
            }
        }
    }
