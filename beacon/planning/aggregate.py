"""Beacon – Portfolio aggregation.

Sums per-goal metrics into :class:`PortfolioTotals` and derives the
portfolio-level monthly requirement: everything still to be saved,
spread over the months left until the soonest deadline.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from .types import GoalMetrics, PortfolioTotals


def is_financial(target_amount: float) -> bool:
    """Return True for goals that take part in the analysis."""

    return math.isfinite(target_amount) and target_amount > 0


def find_soonest(metrics: Sequence[GoalMetrics]) -> Optional[GoalMetrics]:
    """Return the goal with the earliest deadline, or ``None``.

    Ties resolve to the first such goal in ``metrics``.
    """

    soonest: Optional[GoalMetrics] = None
    for m in metrics:
        if m.target_date is None:
            continue
        if soonest is None or m.target_date < soonest.target_date:  # type: ignore[operator]
            soonest = m
    return soonest


def aggregate_portfolio(metrics: Sequence[GoalMetrics], capacity: float) -> PortfolioTotals:
    """Aggregate goal metrics into portfolio totals.

    Without any dated goal nothing is required per month and the
    portfolio is realistic by definition. An overfunded portfolio
    (negative ``total_remaining``) requires nothing per month either.
    """

    total_budget = math.fsum(m.target_amount for m in metrics)
    saved = math.fsum(m.total_saved for m in metrics)
    remaining = total_budget - saved
    percentage = saved / total_budget * 100.0 if total_budget > 0 else 0.0

    soonest = find_soonest(metrics)
    if soonest is None or not soonest.months_until_deadline:
        return PortfolioTotals(
            total_budget_needed=total_budget,
            total_saved=saved,
            total_remaining=remaining,
            percentage_saved=percentage,
            monthly_required=0.0,
            monthly_gap=-capacity,
            is_realistic=True,
        )

    monthly_required = max(remaining, 0.0) / soonest.months_until_deadline
    monthly_gap = monthly_required - capacity
    return PortfolioTotals(
        total_budget_needed=total_budget,
        total_saved=saved,
        total_remaining=remaining,
        percentage_saved=percentage,
        soonest_deadline=soonest.target_date,
        months_to_soonest=soonest.months_until_deadline,
        monthly_required=monthly_required,
        monthly_gap=monthly_gap,
        is_realistic=monthly_gap <= 0,
    )
