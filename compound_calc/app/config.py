"""Application configuration via pydantic-settings.

Values come from environment variables prefixed with COMPOUND_CALC_ or a
local .env file.
"""

from __future__ import annotations

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COMPOUND_CALC_",
        env_file=".env",
        extra="ignore",
    )

    service_name: str = "compound-calc"
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        description="Front-end origins allowed to call /api/*",
    )
    log_level: str = Field(default="INFO", description="Root logger level")
    log_json: bool = Field(default=False, description="Emit one JSON object per log line")

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level


def get_settings() -> Settings:
    return Settings()
