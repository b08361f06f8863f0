"""
Candidate-job matching engine.

Scores a job posting against a candidate profile on five dimensions
(skills, experience, location, culture, salary) and combines them into a
0-100 match percentage with human-readable reasons.

A dimension the job leaves unspecified (no salary published, no culture
tags, no minimum experience) is dropped from the average and the remaining
weights are renormalized, so candidates are not penalized for gaps in the
posting.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from talent_pipeline.data.models import CandidateProfile, JobPosting, Location
from talent_pipeline.utils.config import ScoringSettings, get_settings
from talent_pipeline.utils.constants import SCORING_DIMENSIONS, MatchScoreLevel


@dataclass(frozen=True)
class DimensionScore:
    """Score for one dimension plus the sentence that explains it."""

    dimension: str
    score: float
    reason: str


@dataclass
class MatchResult:
    """Complete result of matching a candidate to a job."""

    # Basic info
    candidate_id: Optional[str] = None
    job_id: Optional[str] = None
    job_title: str = ""

    # Scores (0-100)
    overall_score: float = 0.0
    score_level: MatchScoreLevel = MatchScoreLevel.POOR
    sub_scores: dict[str, float] = field(default_factory=dict)
    weights_used: dict[str, float] = field(default_factory=dict)

    # Explanation
    reasons: list[str] = field(default_factory=list)
    matched_skills: list[str] = field(default_factory=list)
    skill_gaps: frozenset[str] = frozenset()
    insights: str = ""

    @property
    def excluded_dimensions(self) -> list[str]:
        """Dimensions left out of the average."""
        return [d for d in SCORING_DIMENSIONS if d not in self.sub_scores]

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "job_id": self.job_id,
            "job_title": self.job_title,
            "overall_score": self.overall_score,
            "score_level": self.score_level.value,
            "sub_scores": dict(self.sub_scores),
            "weights_used": {d: round(w, 4) for d, w in self.weights_used.items()},
            "reasons": list(self.reasons),
            "matched_skills": list(self.matched_skills),
            "skill_gaps": sorted(self.skill_gaps),
            "insights": self.insights,
        }


class MatchingEngine:
    """
    Engine for scoring job postings against a candidate profile.

    Pure: the same inputs always produce an identical MatchResult, and
    nothing is logged or stored, so results may be cached freely.
    """

    def __init__(
        self,
        weights: Optional[dict[str, float]] = None,
        settings: Optional[ScoringSettings] = None,
    ):
        """
        Initialize the matching engine.

        Args:
            weights: Optional custom dimension weights (must sum to 1.0)
            settings: Optional scoring settings; defaults to the app settings
        """
        settings = settings or get_settings().scoring
        if weights is not None:
            settings = ScoringSettings(**{**settings.model_dump(), "weights": dict(weights)})

        self.settings = settings
        self.weights = {d: settings.weights[d] for d in SCORING_DIMENSIONS}

    def score(self, candidate: CandidateProfile, job: JobPosting) -> MatchResult:
        """
        Score a job posting for a candidate.

        Args:
            candidate: Candidate attributes
            job: Job posting attributes

        Returns:
            MatchResult with sub-scores, reasons and skill gaps
        """
        skills, matched, gaps = self._match_skills(candidate, job)
        dimensions: dict[str, Optional[DimensionScore]] = {
            "skills": skills,
            "experience": self._match_experience(candidate, job),
            "location": self._match_location(candidate, job),
            "culture": self._match_culture(candidate, job),
            "salary": self._match_salary(candidate, job),
        }
        included = [d for d in SCORING_DIMENSIONS if dimensions[d] is not None]

        # Skills is always scored, so at least one dimension is included
        weights_used = self._renormalize(included)
        overall = round(sum(dimensions[d].score * weights_used[d] for d in included), 1)

        result = MatchResult(
            candidate_id=candidate.candidate_id,
            job_id=job.job_id,
            job_title=job.title,
            overall_score=overall,
            score_level=MatchScoreLevel.from_score(overall),
            sub_scores={d: round(dimensions[d].score, 1) for d in included},
            weights_used=weights_used,
            reasons=self._select_reasons([dimensions[d] for d in included]),
            matched_skills=matched,
            skill_gaps=frozenset(gaps),
        )
        result.insights = self._generate_insights(result, candidate)
        return result

    def rank_jobs(
        self,
        candidate: CandidateProfile,
        jobs: list[JobPosting],
    ) -> list[tuple[JobPosting, MatchResult]]:
        """
        Rank job postings for a candidate by overall match score.

        Args:
            candidate: Candidate attributes
            jobs: Postings to rank

        Returns:
            (job, result) pairs, best match first; ties keep input order
        """
        scored = [(job, self.score(candidate, job)) for job in jobs]
        return sorted(scored, key=lambda x: x[1].overall_score, reverse=True)

    # -------------------------------------------------------------------------
    # Dimension scoring
    # -------------------------------------------------------------------------

    def _match_skills(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
    ) -> tuple[DimensionScore, list[str], list[str]]:
        """Share of required skills the candidate has."""
        candidate_skills = {s.lower() for s in candidate.skills}

        # Keep the posting's spelling for display, first occurrence wins
        required: dict[str, str] = {}
        for skill in job.required_skills:
            required.setdefault(skill.lower(), skill)

        if not required:
            return (
                DimensionScore("skills", 100.0, "No specific skills required"),
                [],
                [],
            )

        matched = [name for key, name in required.items() if key in candidate_skills]
        gaps = [name for key, name in required.items() if key not in candidate_skills]
        score = 100.0 * len(matched) / len(required)

        reason = f"Strong skills match: {len(matched)} of {len(required)} required skills"
        return DimensionScore("skills", score, reason), matched, gaps

    def _match_experience(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
    ) -> Optional[DimensionScore]:
        """Linear credit up to the required minimum years."""
        required_years = job.experience_min_years
        if not required_years or candidate.years_experience is None:
            return None

        candidate_years = candidate.years_experience
        score = max(0.0, min(100.0, 100.0 * candidate_years / required_years))

        if job.experience_max_years and job.experience_max_years > required_years:
            requirement = f"{required_years:g}-{job.experience_max_years:g}"
        else:
            requirement = f"{required_years:g}"

        if job.experience_max_years and candidate_years > job.experience_max_years:
            reason = (
                f"Experience exceeds the range: {candidate_years:g} years "
                f"(required: {requirement})"
            )
        elif candidate_years >= required_years:
            reason = (
                f"Experience fits: {candidate_years:g} years "
                f"(required: {requirement})"
            )
        else:
            reason = (
                f"Experience close to requirement: {candidate_years:g} of "
                f"{required_years:g} years"
            )
        return DimensionScore("experience", score, reason)

    def _match_location(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
    ) -> Optional[DimensionScore]:
        """Full credit for remote or matching location, partial for same region/country."""
        if job.remote:
            return DimensionScore("location", 100.0, "Remote position: location is not a constraint")

        if job.location is None or job.location.is_empty:
            return None
        if candidate.location is None or candidate.location.is_empty:
            return None

        job_parts = self._location_parts(job.location)
        candidate_parts = self._location_parts(candidate.location)

        if all(candidate_parts[k] == v for k, v in job_parts.items() if v):
            return DimensionScore(
                "location", 100.0, f"Location match: {job.location.display()}"
            )

        for part in ("region", "country"):
            if job_parts[part] and job_parts[part] == candidate_parts[part]:
                return DimensionScore(
                    "location",
                    self.settings.location_partial_credit,
                    f"Nearby location: same {part} as {job.location.display()}",
                )

        return DimensionScore("location", 0.0, f"Job is based in {job.location.display()}")

    @staticmethod
    def _location_parts(location: Location) -> dict[str, Optional[str]]:
        return {
            "city": location.city.strip().lower() if location.city else None,
            "region": location.region.strip().lower() if location.region else None,
            "country": location.country.strip().lower() if location.country else None,
        }

    def _match_culture(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
    ) -> Optional[DimensionScore]:
        """Share of the company's culture tags the candidate is looking for."""
        job_tags: dict[str, str] = {}
        for tag in job.culture_tags:
            job_tags.setdefault(tag.lower(), tag)

        preferences = {p.lower() for p in candidate.culture_preferences}
        if not job_tags or not preferences:
            return None

        shared = [name for key, name in job_tags.items() if key in preferences]
        score = 100.0 * len(shared) / len(job_tags)

        reason = f"Culture fit: shares {len(shared)} of {len(job_tags)} workplace values"
        if shared:
            reason += f" ({', '.join(shared[:3])})"
        return DimensionScore("culture", score, reason)

    def _match_salary(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
    ) -> Optional[DimensionScore]:
        """Credit for how much of the desired salary band the offer covers."""
        offered = job.salary
        desired = candidate.desired_salary
        if offered is None or offered.is_empty or desired is None or desired.is_empty:
            return None

        offered_low, offered_high = offered.low, offered.high
        desired_low, desired_high = desired.low, desired.high

        if offered_high >= desired_high:
            return DimensionScore("salary", 100.0, "Salary range meets your expectations")

        if offered_high <= desired_low:
            score = 0.0
        else:
            overlap = offered_high - max(offered_low, desired_low)
            if overlap <= 0:
                # A single-figure offer inside the band covers it up to that figure
                overlap = offered_high - desired_low
            score = 100.0 * overlap / (desired_high - desired_low)

        return DimensionScore(
            "salary",
            max(0.0, min(100.0, score)),
            "Salary range partially meets your expectations",
        )

    # -------------------------------------------------------------------------
    # Composite and explanation
    # -------------------------------------------------------------------------

    def _renormalize(self, included: list[str]) -> dict[str, float]:
        """Scale the weights of the included dimensions to sum to 1.0."""
        total = sum(self.weights[d] for d in included)
        if total <= 0:
            return {d: 1.0 / len(included) for d in included}
        return {d: self.weights[d] / total for d in included}

    def _select_reasons(self, scores: list[DimensionScore]) -> list[str]:
        """Top sub-scores at or above the threshold, best first."""
        order = {d: i for i, d in enumerate(SCORING_DIMENSIONS)}
        strong = [s for s in scores if s.score >= self.settings.reason_threshold]
        strong.sort(key=lambda s: (-s.score, order[s.dimension]))
        return [s.reason for s in strong[: self.settings.max_reasons]]

    def _generate_insights(self, result: MatchResult, candidate: CandidateProfile) -> str:
        """One-paragraph summary shown as the listing's AI insight."""
        subject = candidate.full_name or "This candidate"
        title = result.job_title or "this position"

        if result.score_level == MatchScoreLevel.EXCELLENT:
            summary = f"{subject} is an excellent match for {title}."
        elif result.score_level == MatchScoreLevel.GOOD:
            summary = f"{subject} is a good match for {title}."
        elif result.score_level == MatchScoreLevel.FAIR:
            summary = f"{subject} is a fair match for {title}."
        else:
            summary = f"{subject} may not be the best fit for {title}."

        if result.skill_gaps:
            summary += f" Skills to develop: {', '.join(sorted(result.skill_gaps)[:3])}."
        return summary


# Singleton instance
_matching_engine: Optional[MatchingEngine] = None


def get_matching_engine() -> MatchingEngine:
    """Get the matching engine singleton instance."""
    global _matching_engine
    if _matching_engine is None:
        _matching_engine = MatchingEngine()
    return _matching_engine
