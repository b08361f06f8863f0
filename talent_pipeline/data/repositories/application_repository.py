"""
Application repository for Talent Pipeline.

Stores applications and commits stage transitions with an optimistic
version check, so two recruiters moving the same application at once
cannot both win.
"""

from typing import Any, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from talent_pipeline.core.pipeline.errors import ConcurrencyConflictError, PersistenceError
from talent_pipeline.data.models import (
    Application,
    ApplicationCreate,
    StageEvent,
    StageId,
)
from talent_pipeline.utils.config import get_settings
from talent_pipeline.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class ApplicationRepository(BaseRepository[Application]):
    """Repository for job application documents."""

    @property
    def collection_name(self) -> str:
        return get_settings().database.applications_collection

    @property
    def model_class(self) -> type[Application]:
        return Application

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_from_schema(self, data: ApplicationCreate) -> Application:
        """Register a submitted application in the PENDING stage."""
        try:
            return self.create(Application(**data.model_dump()))
        except DuplicateKeyError as e:
            raise PersistenceError(
                f"Candidate {data.candidate_id} already applied to job {data.job_id}"
            ) from e
        except PyMongoError as e:
            raise PersistenceError(f"Failed to create application: {e}") from e

    # -------------------------------------------------------------------------
    # Transition commit
    # -------------------------------------------------------------------------

    @staticmethod
    def _append_update(stage_event: StageEvent) -> dict[str, Any]:
        return {
            "$push": {"history": stage_event.model_dump()},
            "$set": {"current_stage": stage_event.to_stage, "updated_at": stage_event.occurred_at},
            "$inc": {"version": 1},
        }

    def append_event(self, application: Application, stage_event: StageEvent) -> Application:
        """
        Atomically append a stage event and bump the version.

        Args:
            application: The application as it was loaded (its version is the
                one expected in the store)
            stage_event: Event produced by the state machine

        Returns:
            The application as stored after the write

        Raises:
            ConcurrencyConflictError: Another writer changed the application
            PersistenceError: The database write failed
        """
        try:
            document = self._get_sync_collection().find_one_and_update(
                {"_id": application.id, "version": application.version},
                self._append_update(stage_event),
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to commit transition: {e}") from e

        if document is None:
            raise ConcurrencyConflictError(application.application_id, application.version)

        logger.debug(
            f"Application {application.application_id} moved to {stage_event.to_stage} "
            f"(version {document['version']})"
        )
        return self._to_model(document)

    async def append_event_async(
        self, application: Application, stage_event: StageEvent
    ) -> Application:
        """Atomically append a stage event and bump the version asynchronously."""
        try:
            document = await self._get_async_collection().find_one_and_update(
                {"_id": application.id, "version": application.version},
                self._append_update(stage_event),
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise PersistenceError(f"Failed to commit transition: {e}") from e

        if document is None:
            raise ConcurrencyConflictError(application.application_id, application.version)

        logger.debug(
            f"Application {application.application_id} moved to {stage_event.to_stage} "
            f"(version {document['version']})"
        )
        return self._to_model(document)

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def get_by_job(
        self,
        job_id: str,
        stage: Optional[StageId] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Application]:
        """Applications received for a job, most recently updated first."""
        query: dict[str, Any] = {"job_id": job_id}
        if stage is not None:
            query["current_stage"] = StageId(stage).value
        return self.find(query, skip=skip, limit=limit, sort_by="updated_at")

    # -------------------------------------------------------------------------
    # Aggregations
    # -------------------------------------------------------------------------

    def get_stage_counts(self, job_id: str) -> dict[str, int]:
        """Number of applications in each stage for a job."""
        pipeline = [
            {"$match": {"job_id": job_id}},
            {"$group": {"_id": "$current_stage", "count": {"$sum": 1}}},
        ]
        results = list(self._get_sync_collection().aggregate(pipeline))
        return {r["_id"]: r["count"] for r in results}


# Singleton instance
_application_repository: Optional[ApplicationRepository] = None


def get_application_repository() -> ApplicationRepository:
    """Get the application repository singleton instance."""
    global _application_repository
    if _application_repository is None:
        _application_repository = ApplicationRepository()
    return _application_repository
