"""
Shared test fixtures for the Talent Pipeline test suite.

Sets environment variables before any package imports so settings load in
testing mode, then provides factory fixtures for applications, candidate
profiles and job postings, plus in-memory stand-ins for the application
store, audit store and notification dispatcher.
"""

import os

# === Set environment BEFORE any talent_pipeline imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "talent_pipeline_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")
os.environ.setdefault("LOG_CONSOLE_OUTPUT", "false")

from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import pytest
from bson import ObjectId

from talent_pipeline.core.matching import MatchingEngine
from talent_pipeline.core.pipeline import (
    ApplicationStateMachine,
    ConcurrencyConflictError,
    StageRegistry,
    TransitionValidator,
)
from talent_pipeline.data.models import (
    Application,
    AuditLogCreate,
    CandidateProfile,
    JobPosting,
    Location,
    SalaryRange,
    StageChangeEvent,
    StageEvent,
    StageId,
    TransitionClassification,
)
from talent_pipeline.utils.config import ScoringSettings


FIXED_NOW = datetime(2025, 3, 14, 9, 30, 0)


# ---------------------------------------------------------------------------
# Pipeline core
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    """Deterministic clock advancing one minute per call."""
    ticks = {"n": 0}

    def _now() -> datetime:
        ticks["n"] += 1
        return FIXED_NOW + timedelta(minutes=ticks["n"])

    return _now


@pytest.fixture
def registry():
    return StageRegistry()


@pytest.fixture
def validator(registry):
    return TransitionValidator(registry)


@pytest.fixture
def state_machine(validator, clock):
    return ApplicationStateMachine(validator, clock=clock)


@pytest.fixture
def make_application():
    """Factory that builds an Application already walked through `path`."""

    def _factory(
        path: Optional[list[StageId]] = None,
        job_id: str = "job-001",
        candidate_id: str = "cand-001",
        version: Optional[int] = None,
        with_id: bool = True,
        **kwargs,
    ) -> Application:
        history = []
        current = StageId.PENDING
        for i, target in enumerate(path or []):
            terminal = target in (StageId.ACCEPTED, StageId.REJECTED)
            history.append(
                StageEvent(
                    from_stage=current,
                    to_stage=target,
                    actor_id="employer-1",
                    occurred_at=FIXED_NOW - timedelta(days=len(path) - i),
                    classification=(
                        TransitionClassification.TERMINAL
                        if terminal
                        else TransitionClassification.ADVANCE
                    ),
                )
            )
            current = target

        return Application(
            id=ObjectId() if with_id else None,
            job_id=job_id,
            candidate_id=candidate_id,
            current_stage=current,
            history=history,
            version=len(history) if version is None else version,
            **kwargs,
        )

    return _factory


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


@pytest.fixture
def scoring_settings():
    return ScoringSettings()


@pytest.fixture
def matching_engine(scoring_settings):
    return MatchingEngine(settings=scoring_settings)


@pytest.fixture
def make_candidate():
    """Factory that returns a callable to build CandidateProfile models."""

    def _factory(**overrides: Any) -> CandidateProfile:
        data: dict[str, Any] = {
            "candidate_id": "cand-001",
            "full_name": "Aline Uwase",
            "skills": ["React", "SQL", "TypeScript"],
            "years_experience": 3.0,
            "location": Location(city="Kigali", region="Kigali City", country="Rwanda"),
            "culture_preferences": ["remote-friendly", "mentorship"],
            "desired_salary": SalaryRange(minimum=800_000, maximum=1_200_000),
        }
        data.update(overrides)
        return CandidateProfile(**data)

    return _factory


@pytest.fixture
def make_job():
    """Factory that returns a callable to build JobPosting models."""

    def _factory(**overrides: Any) -> JobPosting:
        data: dict[str, Any] = {
            "job_id": "job-001",
            "title": "Frontend Developer",
            "company": "Irembo",
            "required_skills": ["React", "SQL", "TypeScript"],
            "experience_min_years": 2.0,
            "location": Location(city="Kigali", region="Kigali City", country="Rwanda"),
            "remote": False,
            "culture_tags": ["mentorship", "remote-friendly"],
            "salary": SalaryRange(minimum=900_000, maximum=1_500_000),
        }
        data.update(overrides)
        return JobPosting(**data)

    return _factory


@pytest.fixture
def bare_job():
    """A posting that only names required skills."""
    return JobPosting(job_id="job-bare", title="Intern", required_skills=["SQL"])


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class InMemoryApplicationRepository:
    """Application store with the same compare-and-set contract as Mongo."""

    def __init__(self) -> None:
        self.documents: dict[str, Application] = {}
        self.before_append: Optional[Callable[[], None]] = None
        self.fail_with: Optional[Exception] = None
        self.append_calls = 0

    def add(self, application: Application) -> Application:
        self.documents[application.application_id] = application
        return application

    def get_by_id(self, application_id: str) -> Optional[Application]:
        return self.documents.get(str(application_id))

    def append_event(self, application: Application, stage_event: StageEvent) -> Application:
        self.append_calls += 1
        if self.before_append is not None:
            hook, self.before_append = self.before_append, None
            hook()
        if self.fail_with is not None:
            raise self.fail_with

        stored = self.documents.get(application.application_id)
        if stored is None or stored.version != application.version:
            raise ConcurrencyConflictError(application.application_id, application.version)

        updated = stored.model_copy(
            update={
                "current_stage": stage_event.to_stage,
                "history": [*stored.history, stage_event],
                "version": stored.version + 1,
                "updated_at": stage_event.occurred_at,
            }
        )
        self.documents[application.application_id] = updated
        return updated

    async def get_by_id_async(self, application_id: str) -> Optional[Application]:
        return self.get_by_id(application_id)

    async def append_event_async(
        self, application: Application, stage_event: StageEvent
    ) -> Application:
        return self.append_event(application, stage_event)


class InMemoryAuditRepository:
    def __init__(self) -> None:
        self.entries: list[AuditLogCreate] = []

    def log(self, data: AuditLogCreate) -> AuditLogCreate:
        self.entries.append(data)
        return data

    async def log_async(self, data: AuditLogCreate) -> AuditLogCreate:
        return self.log(data)


class RecordingDispatcher:
    def __init__(self) -> None:
        self.events: list[StageChangeEvent] = []

    def dispatch(self, event: StageChangeEvent) -> None:
        self.events.append(event)


class FailingDispatcher:
    def __init__(self) -> None:
        self.calls = 0

    def dispatch(self, event: StageChangeEvent) -> None:
        self.calls += 1
        raise ConnectionError("notification service unavailable")


@pytest.fixture
def application_store():
    return InMemoryApplicationRepository()


@pytest.fixture
def audit_store():
    return InMemoryAuditRepository()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def failing_dispatcher():
    return FailingDispatcher()


@pytest.fixture
def make_service(application_store, audit_store, dispatcher, state_machine):
    """Factory for a pipeline service wired to the in-memory collaborators."""
    from talent_pipeline.services import ApplicationPipelineService

    def _factory(**overrides: Any) -> ApplicationPipelineService:
        kwargs: dict[str, Any] = {
            "repository": application_store,
            "dispatcher": dispatcher,
            "audit_repository": audit_store,
            "state_machine": state_machine,
            "notifications_enabled": True,
        }
        kwargs.update(overrides)
        return ApplicationPipelineService(**kwargs)

    return _factory
