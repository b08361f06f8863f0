"""
Match input data models for Talent Pipeline.

Defines the candidate profile and job posting shapes the matching engine
scores against each other. These are supplied fresh on every scoring call
and are never persisted by this package.
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator

from .base import EmbeddedModel


class SalaryRange(EmbeddedModel):
    """A salary band. Either bound may be omitted."""

    minimum: Optional[float] = Field(None, ge=0)
    maximum: Optional[float] = Field(None, ge=0)
    currency: str = "RWF"
    period: str = "monthly"

    @model_validator(mode="after")
    def check_bounds(self) -> "SalaryRange":
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError("Salary minimum cannot exceed maximum")
        return self

    @property
    def is_empty(self) -> bool:
        return self.minimum is None and self.maximum is None

    @property
    def low(self) -> Optional[float]:
        return self.minimum if self.minimum is not None else self.maximum

    @property
    def high(self) -> Optional[float]:
        return self.maximum if self.maximum is not None else self.minimum


class Location(EmbeddedModel):
    """Geographic location split into comparable parts."""

    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.city or self.region or self.country)

    def display(self) -> str:
        return ", ".join(p for p in (self.city, self.region, self.country) if p)


class CandidateProfile(EmbeddedModel):
    """Candidate attributes used for matching."""

    candidate_id: Optional[str] = None
    full_name: str = ""
    skills: list[str] = Field(default_factory=list)
    years_experience: Optional[float] = Field(None, ge=0)
    location: Optional[Location] = None
    culture_preferences: list[str] = Field(default_factory=list)
    desired_salary: Optional[SalaryRange] = None

    @field_validator("skills", "culture_preferences")
    @classmethod
    def strip_blank(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]


class JobPosting(EmbeddedModel):
    """Job attributes used for matching."""

    job_id: Optional[str] = None
    title: str = ""
    company: str = ""
    required_skills: list[str] = Field(default_factory=list)
    experience_min_years: Optional[float] = Field(None, ge=0)
    experience_max_years: Optional[float] = Field(None, ge=0)
    location: Optional[Location] = None
    remote: bool = False
    culture_tags: list[str] = Field(default_factory=list)
    salary: Optional[SalaryRange] = None

    @field_validator("required_skills", "culture_tags")
    @classmethod
    def strip_blank(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]
