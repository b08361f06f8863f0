"""
Configuration management for Talent Pipeline.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from talent_pipeline.utils.constants import (
    DEFAULT_LOCATION_PARTIAL_CREDIT,
    DEFAULT_MAX_REASONS,
    DEFAULT_REASON_THRESHOLD,
    DEFAULT_SCORING_WEIGHTS,
)


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "talent_pipeline"
    username: str | None = None
    password: str | None = None

    applications_collection: str = "applications"
    audit_collection: str = "audit_logs"


class ScoringSettings(BaseSettings):
    """Match scoring configuration."""

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_SCORING_WEIGHTS)
    )
    location_partial_credit: float = Field(DEFAULT_LOCATION_PARTIAL_CREDIT, ge=0, le=100)
    reason_threshold: float = Field(DEFAULT_REASON_THRESHOLD, ge=0, le=100)
    max_reasons: int = Field(DEFAULT_MAX_REASONS, ge=0)

    @model_validator(mode="after")
    def validate_weights(self) -> "ScoringSettings":
        """Weights must cover every dimension and sum to 1.0."""
        missing = set(DEFAULT_SCORING_WEIGHTS) - set(self.weights)
        if missing:
            raise ValueError(f"Missing scoring weights: {sorted(missing)}")
        if any(w < 0 for w in self.weights.values()):
            raise ValueError("Scoring weights must be non-negative")
        total = sum(self.weights[d] for d in DEFAULT_SCORING_WEIGHTS)
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total:.4f}")
        return self


class NotificationSettings(BaseSettings):
    """Notification dispatch configuration."""

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")

    enabled: bool = True
    link_base_url: str = "/dashboard/student/applications"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "talent_pipeline.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "Talent Pipeline"
    version: str = "0.1.0"
    description: str = "Application pipeline and match-scoring engine"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
