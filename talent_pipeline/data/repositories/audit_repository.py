"""
Audit log repository for Talent Pipeline.

Stores the decision trail written after every committed stage change.
"""

from typing import Optional

from pymongo.errors import PyMongoError

from talent_pipeline.core.pipeline.errors import PersistenceError
from talent_pipeline.data.models import AuditLog, AuditLogCreate
from talent_pipeline.utils.config import get_settings
from talent_pipeline.utils.constants import AuditAction
from talent_pipeline.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class AuditRepository(BaseRepository[AuditLog]):
    """Repository for audit log document operations."""

    @property
    def collection_name(self) -> str:
        return get_settings().database.audit_collection

    @property
    def model_class(self) -> type[AuditLog]:
        return AuditLog

    @staticmethod
    def _from_schema(data: AuditLogCreate) -> AuditLog:
        fields = data.model_dump(exclude_none=True)
        return AuditLog(**fields)

    # -------------------------------------------------------------------------
    # Create Operations
    # -------------------------------------------------------------------------

    def log(self, data: AuditLogCreate) -> AuditLog:
        """Create an audit log entry from a create schema."""
        try:
            return self.create(self._from_schema(data))
        except PyMongoError as e:
            raise PersistenceError(f"Failed to write audit entry: {e}") from e

    async def log_async(self, data: AuditLogCreate) -> AuditLog:
        """Create an audit log entry from a create schema asynchronously."""
        try:
            return await self.create_async(self._from_schema(data))
        except PyMongoError as e:
            raise PersistenceError(f"Failed to write audit entry: {e}") from e

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def get_for_application(
        self,
        application_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Audit trail of one application, newest first."""
        return self.find({"related_application_id": application_id}, skip=skip, limit=limit)

    def get_compliance_logs(
        self,
        job_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Final hiring decisions, optionally for one job."""
        query: dict = {"compliance_relevant": True}
        if job_id:
            query["related_job_id"] = job_id
        return self.find(query, skip=skip, limit=limit)

    def count_conflicts(self, application_id: str) -> int:
        """Number of transitions on an application lost to concurrent writers."""
        return self.count(
            {
                "related_application_id": application_id,
                "action": AuditAction.TRANSITION_CONFLICT.value,
            }
        )


# Singleton instance
_audit_repository: Optional[AuditRepository] = None


def get_audit_repository() -> AuditRepository:
    """Get the audit repository singleton instance."""
    global _audit_repository
    if _audit_repository is None:
        _audit_repository = AuditRepository()
    return _audit_repository
