from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_BACKENDS = ("memory", "file", "sql")
APP_ENVIRONMENTS = ("development", "production", "test")


class AppSettings(BaseSettings):
    """Environment-driven client configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_ENV: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))

    API_URL: str = Field(
        default="http://localhost:3002",
        validation_alias=AliasChoices("TIMECLOCK_API_URL", "API_URL"),
    )
    API_TIMEOUT: float = 10.0

    TOKEN_KEY: str = "@PontoApp:token"
    STORAGE_BACKEND: str = "file"
    DATA_DIR: Path = Field(default_factory=lambda: Path.home() / ".timeclock")
    STORAGE_DB_URL: str | None = None

    SESSION_CACHE_SECONDS: float = 30.0
    OFFLINE_LOGIN_ENABLED: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    LOG_CONFIGURE: bool = False
    TZ: str | None = None

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def parse_storage_backend(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        if normalized not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")
        return normalized

    @field_validator("APP_ENV", mode="before")
    @classmethod
    def parse_app_env(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        if normalized not in APP_ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {', '.join(APP_ENVIRONMENTS)}")
        return normalized

    @field_validator("TZ", mode="before")
    @classmethod
    def parse_tz(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return str(value).strip()

    @property
    def storage_db_url(self) -> str:
        return self.STORAGE_DB_URL or f"sqlite:///{self.DATA_DIR / 'storage.db'}"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
