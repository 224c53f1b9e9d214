"""Centralized configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables.

    All fields are optional with sensible defaults.
    Validation occurs on first get_settings() call.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    agent_base_url: str = "http://localhost:8000"
    agent_chat_path: str = "/api/agent"
    agent_id: str = "69976ea431f64502bf319c80"
    agent_api_key: str | None = None

    upload_base_url: str | None = None
    upload_path: str = "/api/upload"

    # None disables the timeout: calls are single-shot and may hang
    request_timeout: float | None = None

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {', '.join(sorted(valid_levels))}")
        return upper

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("request_timeout must be > 0 when set")
        return v

    @property
    def resolved_upload_base_url(self) -> str:
        """Upload service base URL, defaulting to the agent service."""
        return self.upload_base_url or self.agent_base_url

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            "agent_base_url": self.agent_base_url,
            "agent_chat_path": self.agent_chat_path,
            "agent_id": self.agent_id,
            "agent_api_key": self.agent_api_key,
            "upload_base_url": self.upload_base_url,
            "upload_path": self.upload_path,
            "request_timeout": self.request_timeout,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached Settings singleton.

    Use this function for dependency injection and testing overrides.
    The cache ensures only one Settings instance exists per process.

    For testing: override with get_settings.cache_clear() then set env vars.
    """
    return Settings()
