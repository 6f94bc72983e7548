"""Rule-based recommendation engine."""

import logging
from typing import Iterable, List, Sequence

from ..models import ContextModel, RecommendationResult, RecommendationRule, RuleOutcome
from .rules import COMPONENT_PRIORITIES, RECOMMENDATION_RULES

logger = logging.getLogger(__name__)

RECOMMENDED_PRIORITY = 100
DEFAULT_PRIORITY = 50


class RecommendationEngine:
    """Evaluates an ordered rule list against a project context.

    The rule list is injected so callers can supply their own table. A rule
    whose condition raises is recorded as failed and skipped; the remaining
    rules are still evaluated.
    """

    def __init__(self, rules: Sequence[RecommendationRule] = RECOMMENDATION_RULES):
        self.rules = tuple(rules)

    def evaluate(self, context: ContextModel) -> RecommendationResult:
        """Collect the components and reasons of every satisfied rule.

        Args:
            context: Project characteristics (any field may be unset)

        Returns:
            RecommendationResult with unique component names, unique reasons
            in first-satisfying-rule order, and one outcome per rule
        """
        result = RecommendationResult()

        for index, rule in enumerate(self.rules):
            outcome = self._check(index, rule, context)
            result.outcomes.append(outcome)
            if not outcome.matched:
                continue

            _union(result.skills, rule.skills)
            _union(result.agents, rule.agents)
            _union(result.hooks, rule.hooks)

            if rule.reason and not rule.always and rule.reason not in result.reasons:
                result.reasons.append(rule.reason)

        return result

    def _check(self, index: int, rule: RecommendationRule, context: ContextModel) -> RuleOutcome:
        """Evaluate one condition, capturing any exception it raises."""
        try:
            matched = bool(rule.condition(context))
        except Exception as e:
            logger.debug("Recommendation rule %d failed: %s", index, e)
            return RuleOutcome(rule_index=index, matched=False, error=f"{type(e).__name__}: {e}")
        return RuleOutcome(rule_index=index, matched=matched)


def _union(target: List[str], names: Iterable[str]) -> None:
    for name in names:
        if name not in target:
            target.append(name)


def evaluate(rules: Sequence[RecommendationRule], context: ContextModel) -> RecommendationResult:
    """Evaluate ``rules`` against ``context``."""
    return RecommendationEngine(rules).evaluate(context)


def analyze_project(context: ContextModel) -> RecommendationResult:
    """Evaluate the built-in rule table."""
    return RecommendationEngine().evaluate(context)


def get_priority_score(name: str, recommended: Sequence[str]) -> int:
    """Score a component; recommended names always rank highest."""
    if name in recommended:
        return RECOMMENDED_PRIORITY
    return COMPONENT_PRIORITIES.get(name, DEFAULT_PRIORITY)


def sort_by_priority(components: Sequence[str], recommended: Sequence[str]) -> List[str]:
    """Order components by descending priority, keeping input order for ties."""
    return sorted(components, key=lambda name: -get_priority_score(name, recommended))
