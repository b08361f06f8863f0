"""
Pydantic data models and schemas for Talent Pipeline.

This module provides all data models used throughout the application,
including database documents, embedded models, and scoring inputs.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, PyObjectId, TimestampMixin, utc_now

# Application models
from .application import (
    Application,
    ApplicationCreate,
    RejectionDetails,
    StageChangeEvent,
    StageEvent,
    StageId,
    TransitionClassification,
)

# Match input models
from .match import (
    CandidateProfile,
    JobPosting,
    Location,
    SalaryRange,
)

# Audit models
from .audit import (
    ActorInfo,
    AuditLog,
    AuditLogCreate,
    ChangeRecord,
    ResourceInfo,
    create_stage_changed_audit,
    create_transition_conflict_audit,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "TimestampMixin",
    "utc_now",
    # Application
    "Application",
    "ApplicationCreate",
    "RejectionDetails",
    "StageChangeEvent",
    "StageEvent",
    "StageId",
    "TransitionClassification",
    # Match
    "CandidateProfile",
    "JobPosting",
    "Location",
    "SalaryRange",
    # Audit
    "ActorInfo",
    "AuditLog",
    "AuditLogCreate",
    "ChangeRecord",
    "ResourceInfo",
    "create_stage_changed_audit",
    "create_transition_conflict_audit",
]
