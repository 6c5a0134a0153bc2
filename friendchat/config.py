"""Configuration - Loads application settings from environment variables."""

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_AVATARS = ["😀", "😎", "🤠", "😍", "🥳", "🤩", "😊", "🐱", "🐶", "🦊"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Server
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into list."""
        if self.cors_origins == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    # ==========================================================================
    # Accounts
    # ==========================================================================
    min_username_length: int = 3
    enforce_passwords: bool = True  # False = accept any password on login
    avatars: List[str] = DEFAULT_AVATARS

    @field_validator("avatars")
    @classmethod
    def avatars_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("AVATARS must contain at least one avatar")
        return value

    # ==========================================================================
    # Chat
    # ==========================================================================
    search_result_limit: int = 10
    global_history_size: int = 50  # 0 disables global replay

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading env vars on every connection.
    """
    return Settings()
