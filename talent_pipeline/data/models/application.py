"""
Job application data models for Talent Pipeline.

Defines the application entity, its append-only stage history, and the
domain event produced whenever an application changes stage.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from talent_pipeline.utils.constants import REJECTION_REASONS

from .base import BaseDocument, EmbeddedModel, utc_now


class StageId(str, Enum):
    """Identifiers of the stages an application moves through."""

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEWED = "INTERVIEWED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class TransitionClassification(str, Enum):
    """How a stage change relates to the main line of stages."""

    ADVANCE = "ADVANCE"
    REGRESS = "REGRESS"
    TERMINAL = "TERMINAL"


class StageEvent(EmbeddedModel):
    """One entry of an application's stage history. Never mutated."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        frozen=True,
    )

    from_stage: StageId
    to_stage: StageId
    message: Optional[str] = None
    actor_id: str
    occurred_at: datetime = Field(default_factory=utc_now)
    classification: TransitionClassification


class RejectionDetails(EmbeddedModel):
    """Structured payload an employer fills in when rejecting a candidate."""

    reason: str
    feedback: Optional[str] = None
    allow_reapplication: bool = False

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        if v not in REJECTION_REASONS:
            raise ValueError(f"Unknown rejection reason: {v!r}")
        return v

    def to_message(self) -> str:
        """Fold the payload into the single message stored on the stage event."""
        parts = [f"Reason: {self.reason}"]
        if self.feedback:
            parts.append(f"Feedback: {self.feedback.strip()}")
        parts.append(
            "Reapplication: allowed" if self.allow_reapplication else "Reapplication: not allowed"
        )
        return "\n".join(parts)


class Application(BaseDocument):
    """
    A candidate's application to a job posting.

    Only the state machine changes `current_stage` and `history`; the
    `version` counter is bumped by the repository on every persisted
    transition and guards against concurrent writers.
    """

    job_id: str
    candidate_id: str
    current_stage: StageId = StageId.PENDING
    history: list[StageEvent] = Field(default_factory=list)
    version: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_stage_matches_history(self) -> "Application":
        expected = self.history[-1].to_stage if self.history else StageId.PENDING
        if self.current_stage != expected:
            raise ValueError(
                f"current_stage {self.current_stage} does not match history ({expected})"
            )
        return self

    @property
    def last_event(self) -> Optional[StageEvent]:
        """Most recent stage event, if any."""
        return self.history[-1] if self.history else None

    @property
    def application_id(self) -> str:
        return self.document_id

    class Settings:
        """MongoDB collection settings."""

        name = "applications"
        indexes = [
            [("job_id", 1), ("candidate_id", 1)],
            "job_id",
            "candidate_id",
            "current_stage",
            "updated_at",
        ]


class ApplicationCreate(BaseModel):
    """Schema for registering a submitted application."""

    job_id: str
    candidate_id: str


class StageChangeEvent(EmbeddedModel):
    """Domain event handed to the notification dispatcher after a transition."""

    application_id: str
    job_id: str
    candidate_id: str
    classification: TransitionClassification
    from_stage: StageId
    to_stage: StageId
    message: Optional[str] = None
    actor_id: str
    occurred_at: datetime = Field(default_factory=utc_now)

    def to_payload(self) -> dict[str, Any]:
        """Minimal payload consumed by the dispatcher."""
        return {
            "application_id": self.application_id,
            "classification": self.classification,
            "to_stage": self.to_stage,
            "message": self.message,
        }
