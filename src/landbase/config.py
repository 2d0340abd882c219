"""Settings for the land-base service, read from ``LANDBASE_*`` variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class Settings(BaseSettings):
    """Storage locations, ruleset tag and HTTP options."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="LANDBASE_"
    )

    data_dir: Path = Field(default=Path("campaigns"), description="Where campaign snapshots live")
    archive_dir: Path = Field(
        default=Path("archives"), description="Where .landbase exports are written and read"
    )
    rules_version: str = Field(default="1.0", description="Ruleset version used by the domain")
    log_level: str = Field(default="info", description="Log level passed to the HTTP server")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.lower()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.archive_dir):
            directory.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings with their directories created."""

    settings = Settings()
    settings.ensure_directories()
    return settings
