"""
Application configuration management using Pydantic Settings.

Loads configuration from environment variables (prefixed ``PROGRESSION_``)
and .env files.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROGRESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    # ==========================================================================
    # XP Curve Previews
    # ==========================================================================
    xp_preview_max_level: int = Field(
        default=20, ge=1, description="Highest level shown in XP curve previews"
    )
    custom_curve_fallback_xp: int = Field(
        default=100,
        description="XP per level used when a custom curve formula fails to evaluate",
    )

    # ==========================================================================
    # Formula Previews
    # ==========================================================================
    default_preview_level: int = Field(
        default=1, ge=1, description="Character level used for sample values"
    )
    default_skill_rank: int = Field(
        default=1, ge=0, description="Skill rank used for sample values"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
