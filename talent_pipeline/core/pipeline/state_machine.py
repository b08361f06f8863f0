"""
Application state machine.

Applies validated stage transitions to an application, appending to its
history and producing the domain event for notification delivery.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from talent_pipeline.data.models import (
    Application,
    RejectionDetails,
    StageChangeEvent,
    StageEvent,
    StageId,
    utc_now,
)
from talent_pipeline.utils.logger import LoggerMixin

from .errors import TransitionError, TransitionErrorCode
from .transition_validator import Denied, TransitionValidator


@dataclass(frozen=True)
class TransitionResult:
    """A successful transition: the updated application and its event."""

    application: Application
    stage_event: StageEvent
    event: StageChangeEvent

    ok = True


MoveOutcome = Union[TransitionResult, TransitionError]


class ApplicationStateMachine(LoggerMixin):
    """
    Moves applications between stages.

    The input application is never modified. Validation runs to completion
    before anything is built, and a successful call returns a new
    application with the event appended.
    """

    def __init__(
        self,
        validator: Optional[TransitionValidator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.validator = validator or TransitionValidator()
        self.registry = self.validator.registry
        self._clock = clock

    def move_stage(
        self,
        application: Application,
        requested_stage_id: StageId | str,
        message: Optional[str] = None,
        *,
        actor_id: str,
    ) -> MoveOutcome:
        """
        Move an application to the requested stage.

        Args:
            application: Application in its current state
            requested_stage_id: Target stage
            message: Optional note included in the notification
            actor_id: Who requested the change

        Returns:
            TransitionResult on success, TransitionError when refused
        """
        outcome = self.validator.validate(application, requested_stage_id)
        if isinstance(outcome, Denied):
            self.logger.info(
                f"Transition to {requested_stage_id} denied for application "
                f"{application.application_id or '<new>'}: {outcome.reason.value}"
            )
            return TransitionError(outcome.reason, outcome.detail)

        target = self.registry.get_stage(requested_stage_id).id
        now = self._clock()
        message = message.strip() if message and message.strip() else None

        stage_event = StageEvent(
            from_stage=application.current_stage,
            to_stage=target,
            message=message,
            actor_id=actor_id,
            occurred_at=now,
            classification=outcome.classification,
        )

        updated = application.model_copy(
            update={
                "current_stage": stage_event.to_stage,
                "history": [*application.history, stage_event],
                "updated_at": now,
            }
        )

        event = StageChangeEvent(
            application_id=application.application_id,
            job_id=application.job_id,
            candidate_id=application.candidate_id,
            classification=stage_event.classification,
            from_stage=stage_event.from_stage,
            to_stage=stage_event.to_stage,
            message=message,
            actor_id=actor_id,
            occurred_at=now,
        )

        return TransitionResult(application=updated, stage_event=stage_event, event=event)

    # -------------------------------------------------------------------------
    # Convenience operations
    # -------------------------------------------------------------------------

    def shortlist(
        self,
        application: Application,
        message: Optional[str] = None,
        *,
        actor_id: str,
    ) -> MoveOutcome:
        return self.move_stage(application, StageId.SHORTLISTED, message, actor_id=actor_id)

    def reject(
        self,
        application: Application,
        details: RejectionDetails,
        *,
        actor_id: str,
    ) -> MoveOutcome:
        return self.move_stage(
            application, StageId.REJECTED, details.to_message(), actor_id=actor_id
        )

    def advance(
        self,
        application: Application,
        message: Optional[str] = None,
        *,
        actor_id: str,
    ) -> MoveOutcome:
        """Move to the next stage on the main line."""
        current = self.registry.get_stage(application.current_stage)
        if current.terminal:
            return TransitionError(
                TransitionErrorCode.APPLICATION_CLOSED,
                f"Application is closed in stage {current.id.value}",
            )

        following = self.registry.next_stage(current.id)
        if following is None:
            return TransitionError(
                TransitionErrorCode.NO_NEXT_STAGE,
                f"No stage follows {current.id.value}",
            )

        if message is None:
            message = f"Application moved to {following.id.value.lower()} stage"
        return self.move_stage(application, following.id, message, actor_id=actor_id)
