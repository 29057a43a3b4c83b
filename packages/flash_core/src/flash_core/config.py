"""
Foundation settings for the Flash ecosystem.
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlashSettings(BaseSettings):
    """
    Core settings for all Flash modules.
    Individual packages (like flash_cron) should inherit from this.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # --- Basic Environment ---
    DEBUG: bool = True
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level

    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT == "development"


# Singleton instance for core use
flash_settings = FlashSettings()
