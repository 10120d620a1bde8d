"""Beacon – Portfolio health scoring.

The health score is a deterministic weighted sum of four signals, each
with a fixed ceiling:

- progress (40): overall percentage saved;
- feasibility (30): full marks when the portfolio is realistic, partial
  credit proportional to capacity over the summed per-goal requirement
  otherwise;
- time buffer (20): average months left until deadlines, full marks at
  ``full_time_buffer_months``;
- distribution (10): share of goals that are at least half funded.

Only order-independent sums are used, so the score does not change when
the goal list is permuted.
"""

from __future__ import annotations

import math
from typing import Sequence

from .config import AnalysisConfig
from .types import GoalMetrics, HealthBand, HealthComponents, PortfolioTotals


PROGRESS_WEIGHT = 40.0
FEASIBILITY_WEIGHT = 30.0
TIME_BUFFER_WEIGHT = 20.0
DISTRIBUTION_WEIGHT = 10.0

HEALTH_MESSAGES = {
    HealthBand.EXCELLENT: "Excellent financial planning",
    HealthBand.GOOD: "Good progress, minor adjustments needed",
    HealthBand.NEEDS_ATTENTION: "Needs attention and planning",
    HealthBand.REQUIRES_ACTION: "Requires immediate action",
}


def compute_health_components(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> HealthComponents:
    """Return the four weighted components of the health score."""

    config = config or AnalysisConfig()
    count = len(metrics)

    progress = min(PROGRESS_WEIGHT, max(0.0, totals.percentage_saved) * PROGRESS_WEIGHT / 100.0)

    if totals.is_realistic:
        feasibility = FEASIBILITY_WEIGHT
    else:
        total_required = math.fsum(m.monthly_required for m in metrics)
        if total_required <= 0:
            feasibility = FEASIBILITY_WEIGHT
        else:
            ratio = max(0.0, capacity) / total_required
            feasibility = min(FEASIBILITY_WEIGHT, ratio * FEASIBILITY_WEIGHT)

    if count:
        avg_months = math.fsum(
            m.months_until_deadline or config.default_months_without_deadline for m in metrics
        ) / count
        time_buffer = min(
            TIME_BUFFER_WEIGHT,
            avg_months / config.full_time_buffer_months * TIME_BUFFER_WEIGHT,
        )
        funded = sum(1 for m in metrics if m.percentage_saved >= config.on_track_percentage)
        distribution = funded / count * DISTRIBUTION_WEIGHT
    else:
        time_buffer = 0.0
        distribution = 0.0

    return HealthComponents(
        progress=progress,
        feasibility=feasibility,
        time_buffer=time_buffer,
        distribution=distribution,
    )


def score_from_components(components: HealthComponents) -> int:
    """Clamp the component sum to [0, 100] and round half up."""

    total = min(100.0, max(0.0, components.total))
    return int(math.floor(total + 0.5))


def compute_health_score(
    metrics: Sequence[GoalMetrics],
    totals: PortfolioTotals,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> int:
    """Return the 0-100 portfolio health score."""

    return score_from_components(compute_health_components(metrics, totals, capacity, config))


def classify_health(score: int) -> HealthBand:
    if score >= 80:
        return HealthBand.EXCELLENT
    if score >= 60:
        return HealthBand.GOOD
    if score >= 40:
        return HealthBand.NEEDS_ATTENTION
    return HealthBand.REQUIRES_ACTION


def health_message(band: HealthBand) -> str:
    return HEALTH_MESSAGES[band]
