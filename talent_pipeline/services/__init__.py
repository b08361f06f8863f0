"""
Business services for Talent Pipeline.

High-level services that orchestrate the pipeline core, persistence and
notifications.
"""

from talent_pipeline.services.notifications import (
    LoggingNotificationDispatcher,
    NotificationData,
    NotificationDispatcher,
    build_notification,
)
from talent_pipeline.services.pipeline_service import ApplicationPipelineService

__all__ = [
    "ApplicationPipelineService",
    "LoggingNotificationDispatcher",
    "NotificationData",
    "NotificationDispatcher",
    "build_notification",
]
