"""
Legality checks for stage transitions.

Every rule about which stage an application may move to lives here, so
the state machine and any caller previewing options share one answer.
"""

from dataclasses import dataclass
from typing import Optional, Union

from talent_pipeline.data.models import Application, StageId, TransitionClassification

from .errors import TransitionErrorCode, UnknownStageError
from .stage_registry import StageRegistry, get_stage_registry


@dataclass(frozen=True)
class Allowed:
    """The transition is legal."""

    classification: TransitionClassification

    ok = True


@dataclass(frozen=True)
class Denied:
    """The transition is refused."""

    reason: TransitionErrorCode
    detail: str = ""

    ok = False


Outcome = Union[Allowed, Denied]


class TransitionValidator:
    """
    Decides whether an application may move to a requested stage.

    Rules, first match wins:
    1. the requested stage must be registered
    2. a terminal application is closed for good
    3. moving to the current stage is a no-op
    4. rejection is legal from any open stage
    5. acceptance requires the candidate to have been shortlisted
    6. otherwise the rank comparison decides advance or regress
    """

    def __init__(self, registry: Optional[StageRegistry] = None):
        self.registry = registry or get_stage_registry()

    def validate(self, application: Application, requested_stage_id: StageId | str) -> Outcome:
        try:
            requested = self.registry.get_stage(requested_stage_id)
        except UnknownStageError:
            return Denied(
                TransitionErrorCode.UNKNOWN_STAGE,
                f"Stage {requested_stage_id!r} is not registered",
            )

        current = self.registry.get_stage(application.current_stage)

        if current.terminal:
            return Denied(
                TransitionErrorCode.APPLICATION_CLOSED,
                f"Application is closed in stage {current.id.value}",
            )

        if requested.id == current.id:
            return Denied(
                TransitionErrorCode.NO_OP,
                f"Application is already in stage {current.id.value}",
            )

        if requested.id == StageId.REJECTED:
            return Allowed(TransitionClassification.TERMINAL)

        if requested.id == StageId.ACCEPTED:
            shortlisted_rank = self.registry.rank_of(StageId.SHORTLISTED)
            if current.rank is None or current.rank < shortlisted_rank:
                return Denied(
                    TransitionErrorCode.SKIPPED_REQUIRED_STAGE,
                    f"Cannot accept from {current.id.value} without shortlisting first",
                )

        if requested.terminal:
            return Allowed(TransitionClassification.TERMINAL)

        if requested.rank > current.rank:
            return Allowed(TransitionClassification.ADVANCE)
        return Allowed(TransitionClassification.REGRESS)

    def allowed_targets(self, application: Application) -> list[StageId]:
        """Stages the application could legally move to right now."""
        return [
            stage.id
            for stage in self.registry.list_stages()
            if isinstance(self.validate(application, stage.id), Allowed)
        ]
