"""
Error types for the application pipeline.

Validation failures are returned as `TransitionError` values; only
infrastructure problems are raised as exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class TransitionErrorCode(str, Enum):
    """Reasons a stage transition can be refused."""

    UNKNOWN_STAGE = "UNKNOWN_STAGE"
    APPLICATION_CLOSED = "APPLICATION_CLOSED"
    NO_OP = "NO_OP"
    SKIPPED_REQUIRED_STAGE = "SKIPPED_REQUIRED_STAGE"
    NO_NEXT_STAGE = "NO_NEXT_STAGE"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    NOT_FOUND = "NOT_FOUND"


USER_MESSAGES: dict[TransitionErrorCode, str] = {
    TransitionErrorCode.UNKNOWN_STAGE: "The selected stage does not exist.",
    TransitionErrorCode.APPLICATION_CLOSED: "This application has already been closed.",
    TransitionErrorCode.NO_OP: "The application is already in this stage.",
    TransitionErrorCode.SKIPPED_REQUIRED_STAGE: (
        "A candidate must be shortlisted before the application can be accepted."
    ),
    TransitionErrorCode.NO_NEXT_STAGE: "Cannot move to next stage from current status.",
    TransitionErrorCode.CONCURRENCY_CONFLICT: "Please refresh and try again.",
    TransitionErrorCode.NOT_FOUND: "Application not found.",
}


@dataclass(frozen=True)
class TransitionError:
    """A refused transition, reported to the caller without any state change."""

    code: TransitionErrorCode
    detail: str = ""
    # For conflicts: the outcome of re-validating against the fresh state
    revalidated: Optional[Any] = None

    ok = False

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.code]

    @property
    def retryable(self) -> bool:
        return self.code == TransitionErrorCode.CONCURRENCY_CONFLICT

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code.value}: {self.detail}"
        return self.code.value


class PipelineError(Exception):
    """Base class for pipeline infrastructure errors."""


class UnknownStageError(PipelineError, KeyError):
    """Raised when a stage id is not registered."""

    def __init__(self, stage_id: Any):
        self.stage_id = stage_id
        super().__init__(f"Unknown stage: {stage_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class ConcurrencyConflictError(PipelineError):
    """Raised by persistence when the stored version moved on."""

    def __init__(self, application_id: str, expected_version: int):
        self.application_id = application_id
        self.expected_version = expected_version
        super().__init__(
            f"Application {application_id} changed since version {expected_version}"
        )


class PersistenceError(PipelineError):
    """Raised when the application store cannot complete a read or write."""
