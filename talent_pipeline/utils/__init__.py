"""
Utility modules for Talent Pipeline.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from talent_pipeline.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    ROOT_DIR,
)
from talent_pipeline.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    REJECTION_REASONS,
    SCORING_DIMENSIONS,
    AuditAction,
    MatchScoreLevel,
    NotificationPriority,
    NotificationType,
)
from talent_pipeline.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    LoggerMixin,
    mask_sensitive,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "ROOT_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "REJECTION_REASONS",
    "SCORING_DIMENSIONS",
    "AuditAction",
    "MatchScoreLevel",
    "NotificationPriority",
    "NotificationType",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "LoggerMixin",
    "mask_sensitive",
]
