"""Application configuration loaded from the environment.

Values are resolved in this order: environment variables, ``.env.{ENVIRONMENT}``,
``.env``, then the defaults below.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_CURRENT_ENV: str = os.getenv("ENVIRONMENT", "dev")


class Settings(BaseSettings):
    # -----------------------------
    # Service
    # -----------------------------
    PROJECT_NAME: str = Field(default="Movie Room API")
    VERSION: str = Field(default="0.1.0")
    ENVIRONMENT: Literal["dev", "test", "prod"] = Field(default="dev")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=5000)
    LOG_LEVEL: str = Field(default="INFO")
    CLIENT_URL: str = Field(default="http://localhost:3000", description="Allowed CORS origin")

    # -----------------------------
    # Persistence
    # -----------------------------
    DATABASE_URL: str = Field(default="sqlite://movieroom.db")
    PERSISTENCE_TIMEOUT: float = Field(
        default=3.0,
        description="Upper bound in seconds for a single store call made from the socket path",
    )

    # -----------------------------
    # Credentials
    # -----------------------------
    JWT_SECRET: str = Field(default="your-super-secret-jwt-key")
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRES_DAYS: int = Field(default=7)

    # -----------------------------
    # Realtime
    # -----------------------------
    OUTBOX_SIZE: int = Field(default=256, description="Queued outbound events per connection")

    model_config = SettingsConfigDict(
        env_file=(f".env.{_CURRENT_ENV}", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT == "prod"

    @property
    def debug(self) -> bool:
        return self.ENVIRONMENT == "dev"


@lru_cache
def get_settings() -> Settings:
    """Return the cached process-wide :class:`Settings`."""
    return Settings()


settings: Settings = get_settings()

__all__ = ["Settings", "get_settings", "settings"]
