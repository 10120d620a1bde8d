"""Beacon – Per-goal metrics.

This module derives :class:`GoalMetrics` from a single :class:`Goal`:
how much has been saved, what is left, how many months remain until the
deadline, what must be saved per month, and how that requirement
compares to the portfolio's monthly savings capacity.

Every function here is pure; the analysis instant ``now`` is always an
explicit argument.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable, List, Optional

from beacon.core.time import days_until, months_from_days

from .config import AnalysisConfig
from .types import Goal, GoalMetrics, GoalPriority, GoalStatus


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def total_saved(goal: Goal) -> float:
    """Return the sum of a goal's contributions, floored at zero.

    Negative and zero amounts are summed as-is; only the final total is
    floored. Non-finite amounts count as zero.
    """

    return max(0.0, math.fsum(_finite(float(c.amount)) for c in goal.contributions))


def classify_status(
    percentage_saved: float,
    monthly_required: float,
    capacity: float,
    config: AnalysisConfig,
) -> GoalStatus:
    """Classify a goal's monthly requirement against capacity.

    A capacity of zero or below means any positive requirement is over
    capacity, so such goals are ``unrealistic``.
    """

    if percentage_saved >= 100.0:
        return GoalStatus.COMPLETE
    if monthly_required <= 0.0:
        return GoalStatus.NO_DEADLINE
    if capacity <= 0.0:
        return GoalStatus.UNREALISTIC
    if monthly_required <= capacity * config.on_track_ratio:
        return GoalStatus.ON_TRACK
    if monthly_required <= capacity:
        return GoalStatus.ACHIEVABLE
    if monthly_required <= capacity * config.challenging_ratio:
        return GoalStatus.CHALLENGING
    return GoalStatus.UNREALISTIC


def classify_priority(days: Optional[int], config: AnalysisConfig) -> GoalPriority:
    """Derive urgency from the number of days until the deadline."""

    if days is None:
        return GoalPriority.MEDIUM
    if days < config.high_priority_days:
        return GoalPriority.HIGH
    if days < config.medium_priority_days:
        return GoalPriority.MEDIUM
    return GoalPriority.LOW


def compute_goal_metrics(
    goal: Goal,
    now: date | datetime,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> GoalMetrics:
    """Compute :class:`GoalMetrics` for ``goal`` as of ``now``.

    Overdue goals still get ``months_until_deadline == 1`` so that their
    whole remaining amount is due in the next month.
    """

    config = config or AnalysisConfig()

    target_amount = _finite(float(goal.target_amount))
    saved = total_saved(goal)
    remaining = target_amount - saved
    percentage_saved = saved / target_amount * 100.0 if target_amount > 0 else 0.0

    days: Optional[int] = None
    months: Optional[int] = None
    monthly_required = 0.0
    if goal.target_date is not None:
        days = days_until(goal.target_date, now)
        months = months_from_days(days)
        if remaining > 0:
            monthly_required = remaining / months

    return GoalMetrics(
        goal_id=goal.id,
        title=goal.title,
        target_amount=target_amount,
        target_date=goal.target_date,
        total_saved=saved,
        remaining=remaining,
        percentage_saved=percentage_saved,
        days_until_deadline=days,
        months_until_deadline=months,
        monthly_required=monthly_required,
        status=classify_status(percentage_saved, monthly_required, capacity, config),
        priority=classify_priority(days, config),
        contribution_count=len(goal.contributions),
    )


def sort_goal_metrics(metrics: Iterable[GoalMetrics]) -> List[GoalMetrics]:
    """Order metrics by ascending deadline, undated goals last.

    The sort is stable, so goals sharing a deadline keep input order.
    """

    return sorted(
        metrics,
        key=lambda m: (m.target_date is None, m.target_date or date.max),
    )
