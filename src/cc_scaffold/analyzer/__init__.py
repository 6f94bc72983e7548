"""Recommendation engine and rule table."""

from .engine import (
    RecommendationEngine,
    analyze_project,
    evaluate,
    get_priority_score,
    sort_by_priority,
)
from .rules import DEFAULTS, OFFICIAL_SKILLS, RECOMMENDATION_RULES

__all__ = [
    "RecommendationEngine",
    "analyze_project",
    "evaluate",
    "get_priority_score",
    "sort_by_priority",
    "DEFAULTS",
    "OFFICIAL_SKILLS",
    "RECOMMENDATION_RULES",
]
