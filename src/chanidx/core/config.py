# chanidx/core/config.py
"""
Central configuration for the channel index runtime.

Environment variables override defaults.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_json: bool = Field(
        default=True,
        description="Emit JSON log records instead of plain text",
    )

    # Config file paths (glob patterns)
    subscriptions_config_paths: list[str] = Field(
        default_factory=lambda: ["config/subscriptions.yaml"]
    )

    dispatch_max_concurrent: int = Field(
        default=100,
        ge=1,
        description="Maximum concurrent handler invocations per dispatcher",
    )


settings = Settings()
