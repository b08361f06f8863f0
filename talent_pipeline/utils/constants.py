"""
Application-wide constants for Talent Pipeline.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "talent-pipeline"
APP_DISPLAY_NAME: Final[str] = "Talent Pipeline"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Pipeline Constants
# =============================================================================

# Reasons an employer can pick when rejecting an application
REJECTION_REASONS: Final[tuple[str, ...]] = (
    "Qualifications don't match requirements",
    "Position has been filled",
    "Experience level not suitable",
    "Skills gap too significant",
    "Location requirements not met",
    "Salary expectations don't align",
    "Application incomplete",
    "Better candidates selected",
    "Other",
)


# =============================================================================
# Scoring Constants
# =============================================================================

# Order in which match dimensions are scored and reported
SCORING_DIMENSIONS: Final[tuple[str, ...]] = (
    "skills",
    "experience",
    "location",
    "culture",
    "salary",
)

# Default weights for the composite match score (must sum to 1.0)
DEFAULT_SCORING_WEIGHTS: Final[dict[str, float]] = {
    "skills": 0.35,
    "experience": 0.25,
    "location": 0.15,
    "culture": 0.10,
    "salary": 0.15,
}

# Credit given when candidate and job share a region or country but not a city
DEFAULT_LOCATION_PARTIAL_CREDIT: Final[float] = 50.0

# Sub-scores at or above this value produce a human-readable reason
DEFAULT_REASON_THRESHOLD: Final[float] = 80.0
DEFAULT_MAX_REASONS: Final[int] = 3

# Score thresholds on the 0-100 scale
SCORE_THRESHOLDS: Final[dict[str, float]] = {
    "excellent": 85.0,
    "good": 70.0,
    "fair": 50.0,
    "poor": 30.0,
}


# =============================================================================
# Enums
# =============================================================================


class MatchScoreLevel(Enum):
    """Categorical levels for match scores."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "MatchScoreLevel":
        """Convert a numeric 0-100 score to a level."""
        if score >= SCORE_THRESHOLDS["excellent"]:
            return cls.EXCELLENT
        elif score >= SCORE_THRESHOLDS["good"]:
            return cls.GOOD
        elif score >= SCORE_THRESHOLDS["fair"]:
            return cls.FAIR
        return cls.POOR


class AuditAction(str, Enum):
    """Types of actions that can be audited."""

    APPLICATION_STAGE_CHANGED = "application_stage_changed"
    APPLICATION_REJECTED = "application_rejected"
    APPLICATION_ACCEPTED = "application_accepted"
    TRANSITION_CONFLICT = "transition_conflict"
    CANDIDATE_SCORED = "candidate_scored"


class NotificationType(str, Enum):
    """Kinds of notifications delivered to users."""

    MESSAGE = "MESSAGE"
    INTERVIEW = "INTERVIEW"
    APPLICATION_STATUS = "APPLICATION_STATUS"
    GENERAL = "GENERAL"


class NotificationPriority(str, Enum):
    """Delivery priority of a notification."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"
