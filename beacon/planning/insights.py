"""Beacon – Portfolio insight selection.

Where recommendations list portfolio-wide adjustments, the insight is
the one observation a user should read first. Candidates come from two
places:

- portfolio checks, only when more than one goal is tracked: dated goals
  sharing a deadline month that together exceed capacity (timeline
  friction), otherwise a large overall velocity gap;
- one candidate per goal, taken from the first goal rule that matches.

Candidates are ranked by priority, highest first. Ties keep the order
in which they were produced (portfolio checks, then goals in analysis
order), so the selection is reproducible.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence

from .config import AnalysisConfig
from .recommendations import _plural
from .types import GoalMetrics, Insight, InsightType, PortfolioTotals


def _name(m: GoalMetrics) -> str:
    return m.title or m.goal_id


def _join_names(names: Sequence[str]) -> str:
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} and {names[-1]}"


# ============================================================================
# Portfolio checks
# ============================================================================


def _timeline_friction(
    metrics: Sequence[GoalMetrics],
    capacity: float,
    config: AnalysisConfig,
) -> List[Insight]:
    groups: Dict[str, List[GoalMetrics]] = {}
    for m in metrics:
        if m.target_date is None:
            continue
        if m.monthly_required > capacity * config.insight_friction_share:
            groups.setdefault(m.target_date.strftime("%Y-%m"), []).append(m)

    insights: List[Insight] = []
    for group in groups.values():
        if len(group) < 2:
            continue
        total = math.fsum(m.monthly_required for m in group)
        if not total > capacity:
            continue
        month = group[0].target_date.strftime("%B %Y")
        insights.append(
            Insight(
                type=InsightType.TIMELINE_FRICTION,
                title="Timeline friction",
                message=(
                    f"{_join_names([_name(m) for m in group])} fall due in {month} and "
                    f"need {total:,.0f}/month together, {total - capacity:,.0f} more "
                    f"than your capacity of {capacity:,.0f}/month."
                ),
                recommendation="Move one of these goals by 2-3 months to spread the load.",
                priority=10,
                actions=("Adjust timelines", "Increase monthly savings"),
                goal_ids=tuple(m.goal_id for m in group),
            )
        )
    return insights


def _velocity_gap(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig,
) -> Optional[Insight]:
    if not totals.monthly_gap > capacity * config.insight_velocity_gap_ratio:
        return None
    active = [m for m in metrics if m.monthly_required > 0]
    return Insight(
        type=InsightType.VELOCITY_GAP,
        title="Savings velocity gap",
        message=(
            f"Across {_plural(len(active), 'active goal')} you need "
            f"{totals.monthly_required:,.0f}/month but can save {capacity:,.0f}/month, "
            f"a gap of {totals.monthly_gap:,.0f}/month."
        ),
        recommendation="Extend flexible deadlines or raise your monthly savings.",
        priority=9,
        actions=("Adjust timelines", "Increase monthly savings"),
        goal_ids=tuple(m.goal_id for m in active),
    )


# ============================================================================
# Goal rules
# ============================================================================


def _critical(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    months = m.months_until_deadline
    if months is None or months > config.insight_critical_months:
        return None
    if not m.percentage_saved < config.on_track_percentage:
        return None
    return Insight(
        type=InsightType.CRITICAL,
        title="Deadline approaching",
        message=(
            f"{_name(m)} is due in {_plural(months, 'month')} and is {m.percentage_saved:.0f}% "
            f"funded ({m.total_saved:,.0f} of {m.target_amount:,.0f})."
        ),
        recommendation=(
            f"Put {m.monthly_required:,.0f}/month towards it or move the deadline."
        ),
        priority=10,
        actions=("Boost contributions", "Move deadline"),
        goal_ids=(m.goal_id,),
    )


def _velocity_warning(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    months = m.months_until_deadline
    if months is None or not m.monthly_required > capacity:
        return None
    if not m.percentage_saved < config.insight_nearly_complete_percentage:
        return None
    shortfall = m.monthly_required - capacity
    if capacity > 0:
        extension = math.ceil(shortfall / capacity)
        recommendation = (
            f"Extend the deadline by {_plural(extension, 'month')} "
            f"or save {shortfall:,.0f}/month more."
        )
    else:
        recommendation = "Raise your monthly savings or extend the deadline."
    return Insight(
        type=InsightType.VELOCITY_WARNING,
        title="Goal out of reach at current pace",
        message=(
            f"{_name(m)} needs {m.monthly_required:,.0f}/month, {shortfall:,.0f} more than "
            f"your capacity. You would end up {shortfall * months:,.0f} short."
        ),
        recommendation=recommendation,
        priority=8,
        actions=("Extend deadline", "Increase monthly savings"),
        goal_ids=(m.goal_id,),
    )


def _progress(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    if m.months_until_deadline is None or m.monthly_required > capacity:
        return None
    if not (
        config.on_track_percentage
        <= m.percentage_saved
        < config.insight_nearly_complete_percentage
    ):
        return None
    return Insight(
        type=InsightType.PROGRESS,
        title="Good progress",
        message=(
            f"{_name(m)} is {m.percentage_saved:.0f}% funded with "
            f"{m.remaining:,.0f} to go."
        ),
        recommendation=f"Keep saving {m.monthly_required:,.0f}/month to finish on time.",
        priority=4,
        goal_ids=(m.goal_id,),
    )


def _celebration(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    if m.percentage_saved < config.insight_nearly_complete_percentage:
        return None
    days = m.days_until_deadline
    if days is not None and days > 30:
        message = (
            f"{_name(m)} is {m.percentage_saved:.0f}% funded, "
            f"{_plural(days // 30, 'month')} ahead of its deadline."
        )
        recommendation = "Consider moving the surplus to your next goal."
    else:
        message = f"{_name(m)} is {m.percentage_saved:.0f}% funded and in the final stretch."
        recommendation = f"{max(m.remaining, 0.0):,.0f} left to finish it."
    return Insight(
        type=InsightType.CELEBRATION,
        title="Almost there",
        message=message,
        recommendation=recommendation,
        priority=2,
        goal_ids=(m.goal_id,),
    )


def _planning(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    if m.target_date is not None or m.target_amount <= 0:
        return None
    return Insight(
        type=InsightType.PLANNING,
        title="Set a deadline",
        message=f"{_name(m)} has no target date and {max(m.remaining, 0.0):,.0f} left to save.",
        recommendation="Pick a target date to get a monthly savings plan.",
        priority=5,
        actions=("Set target date",),
        goal_ids=(m.goal_id,),
    )


def _encouragement(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    months = m.months_until_deadline
    if months is None or months <= config.insight_encouragement_months:
        return None
    if not (0 < m.total_saved and m.percentage_saved < config.insight_starting_percentage):
        return None
    return Insight(
        type=InsightType.ENCOURAGEMENT,
        title="Off to a start",
        message=(
            f"{_name(m)} is {m.percentage_saved:.0f}% funded with "
            f"{_plural(months, 'month')} to go."
        ),
        recommendation=f"{m.monthly_required:,.0f}/month keeps it on schedule.",
        priority=3,
        goal_ids=(m.goal_id,),
    )


def _opportunity(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    months = m.months_until_deadline
    if months is None or m.monthly_required <= 0:
        return None
    if not m.monthly_required < capacity * config.insight_opportunity_ratio:
        return None
    if not (
        config.insight_opportunity_percentage
        <= m.percentage_saved
        < config.insight_nearly_complete_percentage
    ):
        return None
    months_early = math.floor((capacity - m.monthly_required) / m.monthly_required * months)
    suggested = capacity * config.insight_suggested_share
    return Insight(
        type=InsightType.OPPORTUNITY,
        title="Room to accelerate",
        message=(
            f"{_name(m)} needs only {m.monthly_required:,.0f}/month of your "
            f"{capacity:,.0f}/month capacity."
        ),
        recommendation=(
            f"Saving {suggested:,.0f}/month could finish it up to "
            f"{_plural(months_early, 'month')} early."
        ),
        priority=3,
        actions=("Increase contribution",),
        goal_ids=(m.goal_id,),
    )


def _setup(m: GoalMetrics, capacity: float, config: AnalysisConfig) -> Optional[Insight]:
    if m.target_date is None or m.total_saved > 0:
        return None
    return Insight(
        type=InsightType.SETUP,
        title="Start saving",
        message=f"Nothing has been put towards {_name(m)} yet.",
        recommendation=(
            f"Start with {m.monthly_required:,.0f}/month to reach it by "
            f"{m.target_date.strftime('%B %Y')}."
        ),
        priority=6,
        actions=("Add first contribution",),
        goal_ids=(m.goal_id,),
    )


_GoalRule = Callable[[GoalMetrics, float, AnalysisConfig], Optional[Insight]]

# First match wins; evaluation order is significant.
GOAL_RULES: tuple[_GoalRule, ...] = (
    _critical,
    _velocity_warning,
    _progress,
    _celebration,
    _planning,
    _encouragement,
    _opportunity,
    _setup,
)


# ============================================================================
# Public API
# ============================================================================


def goal_insight(
    m: GoalMetrics,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> Optional[Insight]:
    """Return the insight of the first goal rule that matches ``m``."""

    config = config or AnalysisConfig()
    for rule in GOAL_RULES:
        insight = rule(m, capacity, config)
        if insight is not None:
            return insight
    return None


def generate_insights(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> List[Insight]:
    """Return every candidate insight, highest priority first."""

    config = config or AnalysisConfig()
    candidates: List[Insight] = []
    if len(metrics) > 1:
        candidates.extend(_timeline_friction(metrics, capacity, config))
        if not candidates:
            gap = _velocity_gap(metrics, totals, capacity, config)
            if gap is not None:
                candidates.append(gap)

    for m in metrics:
        insight = goal_insight(m, capacity, config)
        if insight is not None:
            candidates.append(insight)

    # sorted() is stable, so equal priorities keep production order.
    return sorted(candidates, key=lambda i: i.priority, reverse=True)


def select_insight(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> Optional[Insight]:
    """Return the most pressing insight, or None for an empty portfolio."""

    ranked = generate_insights(metrics, totals, capacity, config)
    return ranked[0] if ranked else None
