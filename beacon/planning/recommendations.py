"""Beacon – Portfolio-level recommendations.

Candidate recommendations are evaluated in a fixed order and the first
``max_recommendations`` that trigger are returned. Risk mitigation
(raising capacity, focusing on urgent goals, extending timelines) comes
before optimisation (accelerating), and the order is part of the
engine's reproducible output.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence

from .config import AnalysisConfig
from .types import (
    Difficulty,
    GoalMetrics,
    GoalPriority,
    PortfolioTotals,
    Recommendation,
    RecommendationType,
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _increase_capacity(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig,
) -> Optional[Recommendation]:
    if not totals.monthly_required > capacity:
        return None
    increase = totals.monthly_required - capacity
    return Recommendation(
        type=RecommendationType.INCREASE_CAPACITY,
        title="Increase Monthly Savings",
        description=(
            f"To hit all goals on time, increase savings by {increase:,.0f}/month "
            f"to {totals.monthly_required:,.0f}/month."
        ),
        impact="All goals hit their target dates",
        difficulty=Difficulty.HIGH if increase > capacity else Difficulty.MEDIUM,
        amount=increase,
    )


def _focus_urgent(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig,
) -> Optional[Recommendation]:
    urgent = [
        m
        for m in metrics
        if m.days_until_deadline is not None and m.days_until_deadline < config.urgent_days
    ]
    if not urgent:
        return None
    urgent_total = math.fsum(max(m.remaining, 0.0) for m in urgent)
    urgent_monthly = urgent_total / config.urgent_focus_months
    if urgent_monthly > capacity:
        return None
    return Recommendation(
        type=RecommendationType.FOCUS_URGENT,
        title="Focus on Urgent Goals First",
        description=(
            f"Allocate {urgent_monthly:,.0f}/month to goals due within "
            f"{config.urgent_focus_months} months. Delay other goals."
        ),
        impact=f"{_plural(len(urgent), 'urgent goal')} completed on time",
        difficulty=Difficulty.LOW,
        amount=urgent_monthly,
        goal_ids=tuple(m.goal_id for m in urgent),
    )


def _adjust_timeline(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig,
) -> Optional[Recommendation]:
    flexible = [m for m in metrics if m.priority in (GoalPriority.MEDIUM, GoalPriority.LOW)]
    if not flexible or not totals.monthly_required > capacity:
        return None
    return Recommendation(
        type=RecommendationType.ADJUST_TIMELINE,
        title="Extend Flexible Timelines",
        description=(
            f"Delay {_plural(len(flexible), 'flexible goal')} by 6-12 months "
            "to reduce monthly pressure."
        ),
        impact="Monthly requirement becomes achievable",
        difficulty=Difficulty.LOW,
        goal_ids=tuple(m.goal_id for m in flexible),
    )


def _accelerate(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig,
) -> Optional[Recommendation]:
    if not totals.monthly_required < capacity * config.accelerate_ratio:
        return None
    surplus = capacity - totals.monthly_required
    return Recommendation(
        type=RecommendationType.ACCELERATE,
        title="Accelerate Your Goals",
        description=(
            f"You have {surplus:,.0f}/month surplus. Consider moving deadlines "
            "earlier or adding new goals."
        ),
        impact="Achieve goals faster or expand plans",
        difficulty=Difficulty.LOW,
        amount=surplus,
    )


_Rule = Callable[
    [Sequence[GoalMetrics], PortfolioTotals, float, AnalysisConfig],
    Optional[Recommendation],
]

# Evaluation order is significant.
RULES: tuple[_Rule, ...] = (
    _increase_capacity,
    _focus_urgent,
    _adjust_timeline,
    _accelerate,
)


def generate_recommendations(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> List[Recommendation]:
    """Return at most ``config.max_recommendations`` recommendations."""

    config = config or AnalysisConfig()
    recommendations: List[Recommendation] = []
    for rule in RULES:
        rec = rule(metrics, totals, capacity, config)
        if rec is not None:
            recommendations.append(rec)
    return recommendations[: config.max_recommendations]
