"""Beacon – Timeline conflict detection.

An averaged monthly requirement can look comfortable while several
deadlines pile up in the same calendar month and demand more cash than
has actually accumulated by then. This module surfaces those months.

Algorithm:

1. Bucket goals that have a deadline and still need money by calendar
   month, summing their remaining amounts.
2. Project the cash available by each bucket's month as a savings pool
   plus ``capacity`` accrued for every calendar month until then. With
   the ``shared`` pool strategy all current savings are one fungible
   pool; with ``earmarked`` savings stay with their own goals (already
   netted out of ``remaining``) and the pool is empty.
3. Classify each bucket: conflict, shortage, severity ratio and label.
4. Keep conflicts, months with several goals, and months that use more
   than ``utilisation_threshold`` percent of available cash.
5. Sort chronologically and attach at most
   ``max_conflict_recommendations`` remedial actions to each month.

All sorts are stable so equal amounts resolve by input order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Sequence

from beacon.core.logging import get_logger
from beacon.core.time import add_months, calendar_months_between, month_key, month_start

from .config import AnalysisConfig
from .types import (
    ConflictActionType,
    ConflictRecommendation,
    ConflictSeverity,
    GoalMetrics,
    GoalPriority,
    SavingsPoolStrategy,
    TimelineConflict,
)


logger = get_logger(__name__)


@dataclass
class _MonthBucket:
    month: date
    total_needed: float = 0.0
    goals: List[GoalMetrics] = field(default_factory=list)

    def add(self, metrics: GoalMetrics) -> None:
        self.total_needed += metrics.remaining
        self.goals.append(metrics)


def bucket_by_month(metrics: Sequence[GoalMetrics]) -> Dict[str, _MonthBucket]:
    """Group dated goals with money still to save by calendar month."""

    buckets: Dict[str, _MonthBucket] = {}
    for m in metrics:
        if m.target_date is None or m.remaining <= 0:
            continue
        key = month_key(m.target_date)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = _MonthBucket(month=month_start(m.target_date))
            buckets[key] = bucket
        bucket.add(m)
    return buckets


def savings_pool(current_savings: float, strategy: SavingsPoolStrategy) -> float:
    """Return the savings credited to every month's projection."""

    if strategy is SavingsPoolStrategy.EARMARKED:
        return 0.0
    return current_savings


def classify_severity(ratio: float, config: AnalysisConfig) -> ConflictSeverity:
    if ratio > config.severity_critical_ratio:
        return ConflictSeverity.CRITICAL
    if ratio >= config.severity_high_ratio:
        return ConflictSeverity.HIGH
    if ratio > config.severity_moderate_ratio:
        return ConflictSeverity.MODERATE
    return ConflictSeverity.SAFE


def _conflict_actions(
    bucket: _MonthBucket,
    months_until: int,
    shortage: float,
    capacity: float,
    config: AnalysisConfig,
) -> List[ConflictRecommendation]:
    label = bucket.month.strftime("%B %Y")
    actions: List[ConflictRecommendation] = []

    # Without accrual no delay can close the gap.
    flexible = [m for m in bucket.goals if m.priority is not GoalPriority.HIGH]
    if flexible and capacity > 0:
        cheapest = min(flexible, key=lambda m: m.remaining)
        delay_months = math.ceil(shortage / capacity) + config.delay_buffer_months
        suggested = add_months(cheapest.target_date or bucket.month, delay_months)
        actions.append(
            ConflictRecommendation(
                type=ConflictActionType.DELAY,
                title=f'Delay "{cheapest.title}"',
                description=f"Move to {delay_months} months later ({suggested:%b %Y})",
                impact=f"Reduces {label} demand by {cheapest.remaining:,.0f}",
                goal_id=cheapest.goal_id,
                amount=float(delay_months),
                suggested_date=suggested,
            )
        )

    additional = math.ceil(shortage / max(months_until, 1))
    actions.append(
        ConflictRecommendation(
            type=ConflictActionType.INCREASE_SAVINGS,
            title="Increase Monthly Savings",
            description=f"Save an extra {additional:,.0f}/month",
            impact=f"Covers {label} shortage by deadline",
            amount=float(additional),
        )
    )

    largest = max(bucket.goals, key=lambda m: m.remaining)
    reduction = min(largest.remaining * config.scope_reduction_fraction, shortage)
    share = reduction / largest.target_amount * 100.0 if largest.target_amount > 0 else 0.0
    actions.append(
        ConflictRecommendation(
            type=ConflictActionType.REDUCE_SCOPE,
            title=f'Reduce "{largest.title}" Budget',
            description=f"Lower target by {reduction:,.0f} ({share:.0f}%)",
            impact=f"Eliminates or reduces {label} shortage",
            goal_id=largest.goal_id,
            amount=reduction,
        )
    )
    return actions


def _spread_out_action(bucket: _MonthBucket, percentage_used: float) -> ConflictRecommendation:
    label = bucket.month.strftime("%B %Y")
    return ConflictRecommendation(
        type=ConflictActionType.SPREAD_OUT,
        title="Consider Spreading Deadlines",
        description=(
            f"{len(bucket.goals)} goals due in {label} will use "
            f"{percentage_used:.0f}% of your available savings"
        ),
        impact="Moving one goal to an adjacent month reduces financial pressure",
    )


def detect_timeline_conflicts(
    metrics: Sequence[GoalMetrics],
    now: date | datetime,
    capacity: float,
    current_savings: float,
    config: AnalysisConfig | None = None,
) -> List[TimelineConflict]:
    """Return the retained conflict months in chronological order.

    Args:
        metrics: Goal metrics in analysis order (deadline ascending).
        now: Analysis instant.
        capacity: Monthly savings capacity.
        current_savings: Portfolio-wide total saved so far.
        config: Engine thresholds and pool strategy.
    """

    config = config or AnalysisConfig()
    pool = savings_pool(current_savings, config.pool_strategy)
    buckets = bucket_by_month(metrics)

    conflicts: List[TimelineConflict] = []
    for key in sorted(buckets):
        bucket = buckets[key]
        months_until = max(0, calendar_months_between(now, bucket.month))
        available = pool + capacity * months_until

        is_conflict = bucket.total_needed > available
        shortage = max(0.0, bucket.total_needed - available)
        ratio = bucket.total_needed / max(available, 1.0)
        percentage_used = ratio * 100.0
        has_multiple = len(bucket.goals) > 1

        logger.debug(
            "Month %s: needed=%.2f available=%.2f ratio=%.3f goals=%d",
            key,
            bucket.total_needed,
            available,
            ratio,
            len(bucket.goals),
        )

        if not (is_conflict or has_multiple or percentage_used > config.utilisation_threshold):
            continue

        if is_conflict:
            actions = _conflict_actions(bucket, months_until, shortage, capacity, config)
        elif has_multiple and percentage_used > config.utilisation_threshold:
            actions = [_spread_out_action(bucket, percentage_used)]
        else:
            actions = []

        conflicts.append(
            TimelineConflict(
                month_key=key,
                month=bucket.month,
                total_needed=bucket.total_needed,
                goal_ids=tuple(m.goal_id for m in bucket.goals),
                months_until=months_until,
                available_cash=available,
                is_conflict=is_conflict,
                shortage=shortage,
                severity_ratio=ratio,
                severity=classify_severity(ratio, config),
                percentage_used=percentage_used,
                has_multiple_goals=has_multiple,
                recommendations=tuple(actions[: config.max_conflict_recommendations]),
            )
        )

    return conflicts
