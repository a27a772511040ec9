"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/candidates.db")
    LLM_CONFIG_PATH: str = Field(default="app_config.json")
    SNAPSHOT_DIR: str = Field(default="data/sessions")

    # Per-question countdown in seconds, keyed by difficulty.
    TIME_LIMIT_EASY: int = Field(default=20, ge=1)
    TIME_LIMIT_MEDIUM: int = Field(default=60, ge=1)
    TIME_LIMIT_HARD: int = Field(default=120, ge=1)

    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    ENABLE_FILE_LOGS: bool = True
    LOG_FILE: str = "logs/interview.jsonl"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)

    def time_limit_for(self, difficulty: str) -> int:
        """Return the countdown configured for ``difficulty``."""

        limits = {
            "easy": self.TIME_LIMIT_EASY,
            "medium": self.TIME_LIMIT_MEDIUM,
            "hard": self.TIME_LIMIT_HARD,
        }
        return limits.get(difficulty, self.TIME_LIMIT_MEDIUM)

    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
