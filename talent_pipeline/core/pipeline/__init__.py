"""Application pipeline: stage registry, transition validator and state machine."""

from .errors import (
    ConcurrencyConflictError,
    PersistenceError,
    PipelineError,
    TransitionError,
    TransitionErrorCode,
    UnknownStageError,
)
from .stage_registry import (
    DEFAULT_STAGES,
    Stage,
    StageRegistry,
    get_stage_registry,
)
from .state_machine import (
    ApplicationStateMachine,
    MoveOutcome,
    TransitionResult,
)
from .transition_validator import (
    Allowed,
    Denied,
    Outcome,
    TransitionValidator,
)

__all__ = [
    "ConcurrencyConflictError",
    "PersistenceError",
    "PipelineError",
    "TransitionError",
    "TransitionErrorCode",
    "UnknownStageError",
    "DEFAULT_STAGES",
    "Stage",
    "StageRegistry",
    "get_stage_registry",
    "ApplicationStateMachine",
    "MoveOutcome",
    "TransitionResult",
    "Allowed",
    "Denied",
    "Outcome",
    "TransitionValidator",
]
