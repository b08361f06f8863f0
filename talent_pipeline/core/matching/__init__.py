"""Candidate-job match scoring."""

from .matching_engine import (
    DimensionScore,
    MatchingEngine,
    MatchResult,
    get_matching_engine,
)

__all__ = [
    "DimensionScore",
    "MatchingEngine",
    "MatchResult",
    "get_matching_engine",
]
