"""
Candidate notifications for application stage changes.

The pipeline hands every committed StageChangeEvent to a dispatcher. Real
delivery (in-app inbox, email) lives outside this package; the logging
dispatcher here is the default and records what would have been sent.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from talent_pipeline.core.pipeline.stage_registry import StageRegistry, get_stage_registry
from talent_pipeline.data.models import StageChangeEvent, StageId, TransitionClassification
from talent_pipeline.utils.config import get_settings
from talent_pipeline.utils.constants import NotificationPriority, NotificationType
from talent_pipeline.utils.logger import LoggerMixin


@dataclass
class NotificationData:
    """A notification addressed to one candidate."""

    recipient_id: str
    title: str
    content: str
    type: NotificationType = NotificationType.APPLICATION_STATUS
    priority: NotificationPriority = NotificationPriority.MEDIUM
    link: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient_id": self.recipient_id,
            "title": self.title,
            "content": self.content,
            "type": self.type.value,
            "priority": self.priority.value,
            "link": self.link,
            "metadata": dict(self.metadata),
        }


def build_notification(
    event: StageChangeEvent,
    link_base_url: Optional[str] = None,
    registry: Optional[StageRegistry] = None,
) -> NotificationData:
    """
    Turn a stage change into the notification the candidate receives.

    The employer's message, when given, becomes the body; otherwise a
    sentence naming the new stage is used.
    """
    registry = registry or get_stage_registry()
    if link_base_url is None:
        link_base_url = get_settings().notifications.link_base_url

    label = registry.get_stage(event.to_stage).label

    if event.to_stage == StageId.ACCEPTED:
        title = "Congratulations! Your application was accepted"
        priority = NotificationPriority.HIGH
    elif event.to_stage == StageId.REJECTED:
        title = "Update on your application"
        priority = NotificationPriority.HIGH
    elif event.classification == TransitionClassification.ADVANCE:
        title = f"Your application moved to {label}"
        priority = NotificationPriority.MEDIUM
    else:
        title = f"Your application status changed to {label}"
        priority = NotificationPriority.LOW

    content = event.message or f"Your application is now in the {label} stage."

    return NotificationData(
        recipient_id=event.candidate_id,
        title=title,
        content=content,
        priority=priority,
        link=f"{link_base_url.rstrip('/')}/{event.application_id}",
        metadata=event.to_payload(),
    )


@runtime_checkable
class NotificationDispatcher(Protocol):
    """Anything that can deliver a stage change to the candidate."""

    def dispatch(self, event: StageChangeEvent) -> None:
        ...


class LoggingNotificationDispatcher(LoggerMixin):
    """Dispatcher that writes each notification to the application log."""

    def __init__(self, link_base_url: Optional[str] = None):
        self.link_base_url = link_base_url

    def dispatch(self, event: StageChangeEvent) -> None:
        notification = build_notification(event, self.link_base_url)
        self.logger.info(
            f"Notify {notification.recipient_id} [{notification.priority.value}]: "
            f"{notification.title}"
        )
