"""
Tests for talent_pipeline.core.matching.matching_engine — MatchingEngine scoring.

Default weights: skills 0.35, experience 0.25, location 0.15, culture 0.10,
salary 0.15.
"""

import pytest

from talent_pipeline.core.matching import MatchingEngine, MatchResult, get_matching_engine
from talent_pipeline.data.models import JobPosting, Location, SalaryRange
from talent_pipeline.utils.config import ScoringSettings
from talent_pipeline.utils.constants import MatchScoreLevel


MUSANZE = Location(city="Musanze", region="Northern Province", country="Rwanda")
NAIROBI = Location(city="Nairobi", country="Kenya")


# ── Skills ───────────────────────────────────────────────────────────────────


class TestSkills:
    def test_partial_overlap(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["React", "SQL"])
        job = make_job(required_skills=["React", "SQL", "Go"])
        result = matching_engine.score(candidate, job)

        assert result.sub_scores["skills"] == 66.7
        assert result.skill_gaps == frozenset({"Go"})
        assert result.matched_skills == ["React", "SQL"]

    def test_case_insensitive(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["react", "sql"])
        job = make_job(required_skills=["React", "SQL"])
        result = matching_engine.score(candidate, job)

        assert result.sub_scores["skills"] == 100.0
        assert result.skill_gaps == frozenset()

    def test_duplicate_requirements_counted_once(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["React"])
        job = make_job(required_skills=["React", "react", "Go"])
        assert matching_engine.score(candidate, job).sub_scores["skills"] == 50.0

    def test_no_required_skills_scores_full(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job(required_skills=[]))
        assert result.sub_scores["skills"] == 100.0
        assert "skills" in result.weights_used

    def test_candidate_without_skills(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(skills=[]), make_job())
        assert result.sub_scores["skills"] == 0.0
        assert result.skill_gaps == frozenset({"React", "SQL", "TypeScript"})


# ── Experience ───────────────────────────────────────────────────────────────


class TestExperience:
    def test_meets_requirement(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(years_experience=5), make_job())
        assert result.sub_scores["experience"] == 100.0

    def test_linear_below_requirement(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(years_experience=1)
        result = matching_engine.score(candidate, make_job(experience_min_years=4))
        assert result.sub_scores["experience"] == 25.0

    def test_missing_candidate_years_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(years_experience=None), make_job())

        assert "experience" in result.excluded_dimensions
        assert result.overall_score == 100.0
        assert result.weights_used["skills"] == pytest.approx(0.35 / 0.75)

    def test_zero_years_still_scored(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(years_experience=0), make_job())
        assert result.sub_scores["experience"] == 0.0

    def test_reason_shows_range(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(
            make_candidate(years_experience=3), make_job(experience_max_years=5)
        )
        assert "Experience fits: 3 years (required: 2-5)" in result.reasons

    def test_above_range_keeps_full_score(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(
            make_candidate(years_experience=8), make_job(experience_max_years=5)
        )
        assert result.sub_scores["experience"] == 100.0
        assert "Experience exceeds the range: 8 years (required: 2-5)" in result.reasons

    @pytest.mark.parametrize("minimum", [None, 0])
    def test_no_requirement_excluded(self, matching_engine, make_candidate, make_job, minimum):
        result = matching_engine.score(make_candidate(), make_job(experience_min_years=minimum))
        assert "experience" not in result.sub_scores
        assert "experience" in result.excluded_dimensions


# ── Location ─────────────────────────────────────────────────────────────────


class TestLocation:
    def test_exact_match(self, matching_engine, make_candidate, make_job):
        assert matching_engine.score(make_candidate(), make_job()).sub_scores["location"] == 100.0

    def test_same_country_partial(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(location=MUSANZE), make_job())
        assert result.sub_scores["location"] == 50.0

    def test_different_country(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(location=NAIROBI), make_job())
        assert result.sub_scores["location"] == 0.0

    def test_job_naming_only_country(self, matching_engine, make_candidate, make_job):
        job = make_job(location=Location(country="rwanda"))
        assert matching_engine.score(make_candidate(), job).sub_scores["location"] == 100.0

    def test_remote_ignores_location(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(
            make_candidate(location=NAIROBI), make_job(remote=True)
        )
        assert result.sub_scores["location"] == 100.0

    def test_partial_credit_configurable(self, make_candidate, make_job):
        engine = MatchingEngine(settings=ScoringSettings(location_partial_credit=25))
        result = engine.score(make_candidate(location=MUSANZE), make_job())
        assert result.sub_scores["location"] == 25.0

    def test_job_without_location_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job(location=None))
        assert "location" not in result.sub_scores

    def test_candidate_without_location_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(location=None), make_job())
        assert "location" not in result.sub_scores


# ── Culture ──────────────────────────────────────────────────────────────────


class TestCulture:
    def test_share_of_job_tags(self, matching_engine, make_candidate, make_job):
        job = make_job(culture_tags=["Mentorship", "remote-friendly", "fast-paced", "flat hierarchy"])
        result = matching_engine.score(make_candidate(culture_preferences=["mentorship"]), job)
        assert result.sub_scores["culture"] == 25.0

    def test_no_tags_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job(culture_tags=[]))
        assert "culture" not in result.sub_scores

    def test_no_preferences_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(culture_preferences=[]), make_job())
        assert "culture" not in result.sub_scores


# ── Salary ───────────────────────────────────────────────────────────────────


class TestSalary:
    def test_offer_exceeds_desire(self, matching_engine, make_candidate, make_job):
        assert matching_engine.score(make_candidate(), make_job()).sub_scores["salary"] == 100.0

    def test_offer_contains_desire(self, matching_engine, make_candidate, make_job):
        job = make_job(salary=SalaryRange(minimum=500_000, maximum=2_000_000))
        assert matching_engine.score(make_candidate(), job).sub_scores["salary"] == 100.0

    def test_partial_overlap(self, matching_engine, make_candidate, make_job):
        job = make_job(salary=SalaryRange(minimum=600_000, maximum=1_000_000))
        assert matching_engine.score(make_candidate(), job).sub_scores["salary"] == 50.0

    def test_offer_below_desire(self, matching_engine, make_candidate, make_job):
        job = make_job(salary=SalaryRange(minimum=300_000, maximum=500_000))
        assert matching_engine.score(make_candidate(), job).sub_scores["salary"] == 0.0

    def test_single_figure_offer_inside_band(self, matching_engine, make_candidate, make_job):
        job = make_job(salary=SalaryRange(minimum=1_000_000, maximum=1_000_000))
        assert matching_engine.score(make_candidate(), job).sub_scores["salary"] == 50.0

    def test_open_ended_offer(self, matching_engine, make_candidate, make_job):
        job = make_job(salary=SalaryRange(maximum=1_300_000))
        assert matching_engine.score(make_candidate(), job).sub_scores["salary"] == 100.0

    def test_no_offer_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job(salary=None))
        assert "salary" not in result.sub_scores

    def test_no_expectation_excluded(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(desired_salary=None), make_job())
        assert "salary" not in result.sub_scores


# ── Composite score ──────────────────────────────────────────────────────────


class TestComposite:
    def test_perfect_match(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job())
        assert result.overall_score == 100.0
        assert result.score_level == MatchScoreLevel.EXCELLENT

    def test_weighted_average(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(
            skills=["React", "SQL"], years_experience=1, culture_preferences=["mentorship"]
        )
        result = matching_engine.score(candidate, make_job())

        # 0.35*66.67 + 0.25*50 + 0.15*100 + 0.10*50 + 0.15*100
        assert result.overall_score == 70.8
        assert result.score_level == MatchScoreLevel.GOOD

    def test_renormalizes_over_included(self, matching_engine, make_candidate, bare_job):
        result = matching_engine.score(make_candidate(), bare_job)

        assert result.weights_used == {"skills": pytest.approx(1.0)}
        assert result.overall_score == 100.0
        assert result.excluded_dimensions == ["experience", "location", "culture", "salary"]

    def test_renormalized_weights_sum_to_one(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job(salary=None, culture_tags=[]))
        assert sum(result.weights_used.values()) == pytest.approx(1.0)
        assert result.weights_used["skills"] == pytest.approx(0.35 / 0.75)

    def test_empty_posting(self, matching_engine, make_candidate):
        result = matching_engine.score(make_candidate(), JobPosting())
        assert result.overall_score == 100.0
        assert result.reasons == ["No specific skills required"]

    def test_score_in_range(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(
            skills=[], years_experience=0, location=NAIROBI, culture_preferences=["solo"]
        )
        job = make_job(salary=SalaryRange(minimum=100, maximum=200))
        result = matching_engine.score(candidate, job)
        assert result.overall_score == 0.0
        assert result.score_level == MatchScoreLevel.POOR

    def test_deterministic(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["React"], location=MUSANZE)
        assert matching_engine.score(candidate, make_job()) == matching_engine.score(
            candidate, make_job()
        )


class TestWeights:
    def test_custom_weights(self, make_candidate, make_job):
        engine = MatchingEngine(
            weights={"skills": 1.0, "experience": 0.0, "location": 0.0, "culture": 0.0, "salary": 0.0}
        )
        candidate = make_candidate(skills=["React"], years_experience=0)
        result = engine.score(candidate, make_job())
        assert result.overall_score == pytest.approx(33.3)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            MatchingEngine(
                weights={"skills": 0.5, "experience": 0.1, "location": 0.1, "culture": 0.1, "salary": 0.1}
            )

    def test_weights_must_cover_all_dimensions(self):
        with pytest.raises(ValueError, match="Missing"):
            MatchingEngine(weights={"skills": 1.0})


# ── Explanation ──────────────────────────────────────────────────────────────


class TestReasons:
    def test_top_three_in_dimension_order_on_ties(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job())
        assert len(result.reasons) == 3
        assert result.reasons[0] == "Strong skills match: 3 of 3 required skills"
        assert result.reasons[1].startswith("Experience fits")
        assert result.reasons[2] == "Location match: Kigali, Kigali City, Rwanda"

    def test_only_strong_dimensions(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(
            skills=["React", "SQL"], years_experience=1, culture_preferences=["mentorship"]
        )
        result = matching_engine.score(candidate, make_job())
        assert result.reasons == [
            "Location match: Kigali, Kigali City, Rwanda",
            "Salary range meets your expectations",
        ]

    def test_max_reasons_configurable(self, make_candidate, make_job):
        engine = MatchingEngine(settings=ScoringSettings(max_reasons=1))
        assert len(engine.score(make_candidate(), make_job()).reasons) == 1

    def test_no_reasons_for_poor_match(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=[], years_experience=0, location=NAIROBI)
        job = make_job(salary=None, culture_tags=[])
        assert matching_engine.score(candidate, job).reasons == []


class TestInsights:
    def test_excellent(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job())
        assert result.insights == "Aline Uwase is an excellent match for Frontend Developer."

    def test_mentions_gaps(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(skills=["React"]), make_job())
        assert "Skills to develop: SQL, TypeScript." in result.insights

    def test_anonymous_candidate(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(full_name=""), make_job(title=""))
        assert result.insights.startswith("This candidate is")
        assert "this position" in result.insights


class TestToDict:
    def test_serializable(self, matching_engine, make_candidate, make_job):
        data = matching_engine.score(make_candidate(skills=["SQL"]), make_job()).to_dict()
        assert data["score_level"] in {"excellent", "good", "fair", "poor"}
        assert data["skill_gaps"] == ["React", "TypeScript"]
        assert set(data["sub_scores"]) == {"skills", "experience", "location", "culture", "salary"}


# ── rank_jobs ────────────────────────────────────────────────────────────────


class TestRankJobs:
    def test_descending_sort(self, matching_engine, make_candidate, make_job):
        weak = make_job(job_id="weak", required_skills=["Go", "Rust"])
        strong = make_job(job_id="strong")
        middle = make_job(job_id="middle", required_skills=["React", "Go"])

        ranked = matching_engine.rank_jobs(make_candidate(), [weak, strong, middle])
        assert [job.job_id for job, _ in ranked] == ["strong", "middle", "weak"]
        assert all(isinstance(r, MatchResult) for _, r in ranked)

    def test_ties_keep_input_order(self, matching_engine, make_candidate, make_job):
        first = make_job(job_id="first")
        second = make_job(job_id="second")
        ranked = matching_engine.rank_jobs(make_candidate(), [first, second])
        assert [job.job_id for job, _ in ranked] == ["first", "second"]

    def test_empty_list(self, matching_engine, make_candidate):
        assert matching_engine.rank_jobs(make_candidate(), []) == []


def test_get_matching_engine_singleton():
    assert get_matching_engine() is get_matching_engine()
