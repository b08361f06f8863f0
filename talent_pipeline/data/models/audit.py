"""
Audit log data models for Talent Pipeline.

Defines the schema for the audit trail of pipeline decisions so final
hiring outcomes stay traceable.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from talent_pipeline.utils.constants import AuditAction

from .application import StageChangeEvent, StageId
from .base import BaseDocument, EmbeddedModel


class ActorInfo(EmbeddedModel):
    """Information about the entity that performed the action."""

    actor_type: str = "system"  # "user", "system"
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None


class ResourceInfo(EmbeddedModel):
    """Information about the resource affected by the action."""

    resource_type: str  # "application"
    resource_id: str
    resource_name: Optional[str] = None


class ChangeRecord(EmbeddedModel):
    """Record of a specific field change."""

    field_name: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    change_type: str = "update"  # "create", "update"


class AuditLog(BaseDocument):
    """
    Audit log document for pipeline decisions.

    Tracks every stage change, with rejections and acceptances flagged as
    compliance-relevant, and every transition lost to a concurrent writer.
    """

    action: AuditAction
    action_description: str

    actor: ActorInfo = Field(default_factory=ActorInfo)
    resource: Optional[ResourceInfo] = None
    changes: list[ChangeRecord] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)

    related_application_id: Optional[str] = None
    related_job_id: Optional[str] = None
    related_candidate_id: Optional[str] = None

    compliance_relevant: bool = False

    @property
    def is_final_decision(self) -> bool:
        return self.action in (AuditAction.APPLICATION_ACCEPTED, AuditAction.APPLICATION_REJECTED)

    class Settings:
        """MongoDB collection settings."""

        name = "audit_logs"
        indexes = [
            "action",
            "actor.actor_id",
            "related_application_id",
            "related_job_id",
            "compliance_relevant",
            "created_at",
        ]


class AuditLogCreate(BaseModel):
    """Schema for creating a new audit log entry."""

    action: AuditAction
    action_description: str
    actor: Optional[ActorInfo] = None
    resource: Optional[ResourceInfo] = None
    changes: list[ChangeRecord] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)
    related_application_id: Optional[str] = None
    related_job_id: Optional[str] = None
    related_candidate_id: Optional[str] = None
    compliance_relevant: bool = False


# Utility functions for creating common audit entries

def create_stage_changed_audit(event: StageChangeEvent) -> AuditLogCreate:
    """Create an audit entry for a committed stage change."""
    if event.to_stage == StageId.REJECTED:
        action = AuditAction.APPLICATION_REJECTED
    elif event.to_stage == StageId.ACCEPTED:
        action = AuditAction.APPLICATION_ACCEPTED
    else:
        action = AuditAction.APPLICATION_STAGE_CHANGED

    return AuditLogCreate(
        action=action,
        action_description=(
            f"Application moved from {event.from_stage} to {event.to_stage} "
            f"({event.classification})"
        ),
        actor=ActorInfo(actor_type="user", actor_id=event.actor_id),
        resource=ResourceInfo(
            resource_type="application",
            resource_id=event.application_id,
        ),
        changes=[
            ChangeRecord(
                field_name="current_stage",
                old_value=event.from_stage,
                new_value=event.to_stage,
            )
        ],
        context={"message": event.message} if event.message else {},
        related_application_id=event.application_id,
        related_job_id=event.job_id,
        related_candidate_id=event.candidate_id,
        compliance_relevant=action != AuditAction.APPLICATION_STAGE_CHANGED,
    )


def create_transition_conflict_audit(
    application_id: str,
    requested_stage: str,
    actor_id: str,
    expected_version: int,
) -> AuditLogCreate:
    """Create an audit entry for a transition lost to a concurrent writer."""
    return AuditLogCreate(
        action=AuditAction.TRANSITION_CONFLICT,
        action_description=(
            f"Transition to {requested_stage} rejected: application changed "
            f"since version {expected_version}"
        ),
        actor=ActorInfo(actor_type="user", actor_id=actor_id),
        resource=ResourceInfo(resource_type="application", resource_id=application_id),
        context={"requested_stage": requested_stage, "expected_version": expected_version},
        related_application_id=application_id,
    )
