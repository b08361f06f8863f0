"""
Application pipeline service.

Entry point used by employer-facing callers: loads an application, runs
the state machine, commits the transition with an optimistic version
check, writes the audit trail and notifies the candidate.
"""

import inspect
from typing import Callable, Optional

from pymongo.errors import PyMongoError

from talent_pipeline.core.pipeline import (
    ApplicationStateMachine,
    ConcurrencyConflictError,
    MoveOutcome,
    PersistenceError,
    TransitionError,
    TransitionErrorCode,
    TransitionResult,
)
from talent_pipeline.data.models import (
    Application,
    AuditLogCreate,
    RejectionDetails,
    StageChangeEvent,
    StageId,
    create_stage_changed_audit,
    create_transition_conflict_audit,
)
from talent_pipeline.data.repositories import ApplicationRepository, AuditRepository
from talent_pipeline.utils.config import get_settings
from talent_pipeline.utils.constants import AuditAction
from talent_pipeline.utils.logger import LoggerMixin, audit_log

from .notifications import LoggingNotificationDispatcher, NotificationDispatcher

Operation = Callable[[Application], MoveOutcome]


class ApplicationPipelineService(LoggerMixin):
    """
    Moves stored applications through the hiring pipeline.

    Validation failures come back as TransitionError values. A
    PersistenceError from the store propagates and leaves nothing changed.
    Audit and notification failures happen after the commit and are only
    logged.
    """

    def __init__(
        self,
        repository: Optional[ApplicationRepository] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        audit_repository: Optional[AuditRepository] = None,
        state_machine: Optional[ApplicationStateMachine] = None,
        notifications_enabled: Optional[bool] = None,
    ):
        if repository is None:
            from talent_pipeline.data.repositories import get_application_repository

            repository = get_application_repository()

        self.repository = repository
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        self.audit_repository = audit_repository
        self.state_machine = state_machine or ApplicationStateMachine()
        if notifications_enabled is None:
            notifications_enabled = get_settings().notifications.enabled
        self.notifications_enabled = notifications_enabled

    # -------------------------------------------------------------------------
    # Synchronous operations
    # -------------------------------------------------------------------------

    def move_stage(
        self,
        application_id: str,
        requested_stage_id: StageId | str,
        message: Optional[str] = None,
        *,
        actor_id: str,
    ) -> MoveOutcome:
        """
        Move a stored application to the requested stage.

        Args:
            application_id: Id of the application to move
            requested_stage_id: Target stage
            message: Optional note for the candidate
            actor_id: Employer user performing the move

        Returns:
            TransitionResult with the committed application, or TransitionError
        """
        return self._run(
            application_id,
            lambda app: self.state_machine.move_stage(
                app, requested_stage_id, message, actor_id=actor_id
            ),
            actor_id,
        )

    def shortlist(
        self, application_id: str, message: Optional[str] = None, *, actor_id: str
    ) -> MoveOutcome:
        return self._run(
            application_id,
            lambda app: self.state_machine.shortlist(app, message, actor_id=actor_id),
            actor_id,
        )

    def reject(
        self, application_id: str, details: RejectionDetails, *, actor_id: str
    ) -> MoveOutcome:
        return self._run(
            application_id,
            lambda app: self.state_machine.reject(app, details, actor_id=actor_id),
            actor_id,
        )

    def advance(
        self, application_id: str, message: Optional[str] = None, *, actor_id: str
    ) -> MoveOutcome:
        return self._run(
            application_id,
            lambda app: self.state_machine.advance(app, message, actor_id=actor_id),
            actor_id,
        )

    def _run(self, application_id: str, operation: Operation, actor_id: str) -> MoveOutcome:
        application = self._load(application_id)
        if application is None:
            return self._not_found(application_id)

        outcome = operation(application)
        if isinstance(outcome, TransitionError):
            return outcome

        try:
            committed = self.repository.append_event(application, outcome.stage_event)
        except ConcurrencyConflictError as e:
            fresh = self._load(application_id)
            error, entry = self._conflict(application, outcome, fresh, actor_id, e)
            self._record_audit(entry)
            return error

        result = TransitionResult(
            application=committed, stage_event=outcome.stage_event, event=outcome.event
        )
        self._record_audit(create_stage_changed_audit(result.event))
        self._notify(result.event)
        return result

    def _load(self, application_id: str) -> Optional[Application]:
        try:
            return self.repository.get_by_id(application_id)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to load application {application_id}: {e}") from e

    def _record_audit(self, entry: AuditLogCreate) -> None:
        self._log_audit(entry)
        if self.audit_repository is None:
            return
        try:
            self.audit_repository.log(entry)
        except PersistenceError as e:
            self.logger.error(f"Audit entry not stored: {e}")

    def _notify(self, event: StageChangeEvent) -> None:
        if not self.notifications_enabled:
            return
        try:
            result = self.dispatcher.dispatch(event)
        except Exception as e:
            self.logger.error(
                f"Notification for application {event.application_id} failed: {e}"
            )
            return

        if inspect.isawaitable(result):
            # Nothing runs the coroutine on the sync path; use the *_async operations
            if inspect.iscoroutine(result):
                result.close()
            self.logger.error(
                f"Notification for application {event.application_id} not sent: "
                f"{type(self.dispatcher).__name__} is asynchronous"
            )

    # -------------------------------------------------------------------------
    # Asynchronous operations
    # -------------------------------------------------------------------------

    async def move_stage_async(
        self,
        application_id: str,
        requested_stage_id: StageId | str,
        message: Optional[str] = None,
        *,
        actor_id: str,
    ) -> MoveOutcome:
        """Move a stored application to the requested stage asynchronously."""
        return await self._run_async(
            application_id,
            lambda app: self.state_machine.move_stage(
                app, requested_stage_id, message, actor_id=actor_id
            ),
            actor_id,
        )

    async def shortlist_async(
        self, application_id: str, message: Optional[str] = None, *, actor_id: str
    ) -> MoveOutcome:
        return await self._run_async(
            application_id,
            lambda app: self.state_machine.shortlist(app, message, actor_id=actor_id),
            actor_id,
        )

    async def reject_async(
        self, application_id: str, details: RejectionDetails, *, actor_id: str
    ) -> MoveOutcome:
        return await self._run_async(
            application_id,
            lambda app: self.state_machine.reject(app, details, actor_id=actor_id),
            actor_id,
        )

    async def advance_async(
        self, application_id: str, message: Optional[str] = None, *, actor_id: str
    ) -> MoveOutcome:
        return await self._run_async(
            application_id,
            lambda app: self.state_machine.advance(app, message, actor_id=actor_id),
            actor_id,
        )

    async def _run_async(
        self, application_id: str, operation: Operation, actor_id: str
    ) -> MoveOutcome:
        application = await self._load_async(application_id)
        if application is None:
            return self._not_found(application_id)

        outcome = operation(application)
        if isinstance(outcome, TransitionError):
            return outcome

        try:
            committed = await self.repository.append_event_async(
                application, outcome.stage_event
            )
        except ConcurrencyConflictError as e:
            fresh = await self._load_async(application_id)
            error, entry = self._conflict(application, outcome, fresh, actor_id, e)
            await self._record_audit_async(entry)
            return error

        result = TransitionResult(
            application=committed, stage_event=outcome.stage_event, event=outcome.event
        )
        await self._record_audit_async(create_stage_changed_audit(result.event))
        await self._notify_async(result.event)
        return result

    async def _load_async(self, application_id: str) -> Optional[Application]:
        try:
            return await self.repository.get_by_id_async(application_id)
        except PyMongoError as e:
            raise PersistenceError(f"Failed to load application {application_id}: {e}") from e

    async def _record_audit_async(self, entry: AuditLogCreate) -> None:
        self._log_audit(entry)
        if self.audit_repository is None:
            return
        try:
            await self.audit_repository.log_async(entry)
        except PersistenceError as e:
            self.logger.error(f"Audit entry not stored: {e}")

    async def _notify_async(self, event: StageChangeEvent) -> None:
        if not self.notifications_enabled:
            return
        try:
            result = self.dispatcher.dispatch(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.error(
                f"Notification for application {event.application_id} failed: {e}"
            )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _log_audit(entry: AuditLogCreate) -> None:
        conflict = entry.action == AuditAction.TRANSITION_CONFLICT
        audit_log(
            entry.action.value,
            {
                "application_id": entry.related_application_id,
                "description": entry.action_description,
                "actor_id": entry.actor.actor_id if entry.actor else None,
            },
            audit_type="CONFLICT" if conflict else "DECISION",
        )

    def _not_found(self, application_id: str) -> TransitionError:
        self.logger.info(f"Application {application_id} not found")
        return TransitionError(
            TransitionErrorCode.NOT_FOUND, f"No application with id {application_id!r}"
        )

    def _conflict(
        self,
        stale: Application,
        outcome: TransitionResult,
        fresh: Optional[Application],
        actor_id: str,
        error: ConcurrencyConflictError,
    ) -> tuple[TransitionError, AuditLogCreate]:
        """Re-validate the requested move against the fresh state."""
        target = outcome.stage_event.to_stage
        revalidated = (
            self.state_machine.validator.validate(fresh, target) if fresh is not None else None
        )
        self.logger.warning(
            f"Concurrent update on application {stale.application_id}: "
            f"expected version {stale.version}, move to {target} not applied"
        )
        entry = create_transition_conflict_audit(
            application_id=stale.application_id,
            requested_stage=str(target),
            actor_id=actor_id,
            expected_version=stale.version,
        )
        return TransitionError(
            TransitionErrorCode.CONCURRENCY_CONFLICT, str(error), revalidated=revalidated
        ), entry
