"""
Beacon: Tests for Timeline Conflict Detection

Test suite for ``beacon.planning.conflicts``. Covers:
- Monthly bucketing and cash projection
- Severity classification
- Retention rules and remedial actions
- Savings pool strategies
"""

from __future__ import annotations

from datetime import date

import pytest

from beacon.planning import (
    AnalysisConfig,
    ConflictActionType,
    ConflictSeverity,
    SavingsPoolStrategy,
)
from beacon.planning.conflicts import (
    bucket_by_month,
    classify_severity,
    detect_timeline_conflicts,
    savings_pool,
)
from beacon.planning.metrics import compute_goal_metrics, sort_goal_metrics


def _detect(goals, now, capacity, config=None):
    metrics = sort_goal_metrics(compute_goal_metrics(g, now, capacity) for g in goals)
    saved = sum(m.total_saved for m in metrics)
    return detect_timeline_conflicts(metrics, now, capacity, saved, config)


class TestClassifySeverity:
    config = AnalysisConfig()

    @pytest.mark.parametrize(
        "ratio, expected",
        [
            (2.0, ConflictSeverity.CRITICAL),
            (1.51, ConflictSeverity.CRITICAL),
            (1.5, ConflictSeverity.HIGH),
            (1.49, ConflictSeverity.HIGH),
            (1.2, ConflictSeverity.HIGH),
            (1.19, ConflictSeverity.MODERATE),
            (1.01, ConflictSeverity.MODERATE),
            (1.0, ConflictSeverity.SAFE),
            (0.3, ConflictSeverity.SAFE),
        ],
    )
    def test_bands(self, ratio, expected) -> None:
        assert classify_severity(ratio, self.config) is expected


class TestSavingsPool:
    def test_shared_pool_uses_current_savings(self) -> None:
        assert savings_pool(4000.0, SavingsPoolStrategy.SHARED) == 4000.0

    def test_earmarked_pool_is_empty(self) -> None:
        assert savings_pool(4000.0, SavingsPoolStrategy.EARMARKED) == 0.0


class TestBucketByMonth:
    def test_skips_undated_and_funded_goals(self, goal_factory, as_of: date) -> None:
        goals = [
            goal_factory("a", 1000.0, date(2025, 7, 10)),
            goal_factory("b", 500.0, date(2025, 7, 28), saved=(100.0,)),
            goal_factory("funded", 500.0, date(2025, 7, 1), saved=(500.0,)),
            goal_factory("undated", 500.0),
        ]
        metrics = sort_goal_metrics(compute_goal_metrics(g, as_of, 1000.0) for g in goals)

        buckets = bucket_by_month(metrics)

        assert list(buckets) == ["2025-07"]
        bucket = buckets["2025-07"]
        assert bucket.month == date(2025, 7, 1)
        assert bucket.total_needed == pytest.approx(1400.0)
        assert [m.goal_id for m in bucket.goals] == ["a", "b"]


class TestDetectTimelineConflicts:
    def test_two_goals_in_same_month(self, goal_factory, as_of: date) -> None:
        conflicts = _detect(
            [
                goal_factory("wedding", 12000.0, date(2025, 7, 10)),
                goal_factory("trip", 6000.0, date(2025, 7, 5)),
            ],
            as_of,
            2500.0,
        )

        assert len(conflicts) == 1
        c = conflicts[0]
        assert c.month_key == "2025-07"
        assert c.month == date(2025, 7, 1)
        assert c.goal_ids == ("trip", "wedding")
        assert c.months_until == 6
        assert c.total_needed == pytest.approx(18000.0)
        assert c.available_cash == pytest.approx(15000.0)
        assert c.is_conflict is True
        assert c.shortage == pytest.approx(3000.0)
        assert c.severity_ratio == pytest.approx(1.2)
        assert c.severity is ConflictSeverity.HIGH
        assert c.percentage_used == pytest.approx(120.0)
        assert c.has_multiple_goals is True

        # Both goals are HIGH priority, so no delay is proposed.
        assert [a.type for a in c.recommendations] == [
            ConflictActionType.INCREASE_SAVINGS,
            ConflictActionType.REDUCE_SCOPE,
        ]
        increase, reduce_scope = c.recommendations
        assert increase.amount == 500.0
        assert reduce_scope.goal_id == "wedding"
        assert reduce_scope.amount == pytest.approx(2400.0)
        assert "(20%)" in reduce_scope.description

    def test_delay_targets_cheapest_flexible_goal(self, goal_factory, as_of: date) -> None:
        conflicts = _detect(
            [
                goal_factory("x", 8000.0, date(2025, 10, 20)),
                goal_factory("y", 6000.0, date(2025, 10, 20)),
            ],
            as_of,
            1000.0,
        )

        assert len(conflicts) == 1
        c = conflicts[0]
        assert c.months_until == 9
        assert c.shortage == pytest.approx(5000.0)
        assert c.severity is ConflictSeverity.CRITICAL

        delay, increase = c.recommendations
        assert delay.type is ConflictActionType.DELAY
        assert delay.goal_id == "y"
        # ceil(5000 / 1000) plus a three-month buffer.
        assert delay.amount == 8.0
        assert delay.suggested_date == date(2026, 6, 20)
        assert increase.type is ConflictActionType.INCREASE_SAVINGS
        assert increase.amount == 556.0

    def test_demand_at_one_and_a_half_times_cash_is_high(
        self, goal_factory, as_of: date
    ) -> None:
        conflicts = _detect([goal_factory("car", 15000.0, date(2025, 11, 20))], as_of, 1000.0)

        assert len(conflicts) == 1
        c = conflicts[0]
        assert c.months_until == 10
        assert c.available_cash == pytest.approx(10000.0)
        assert c.severity_ratio == pytest.approx(1.5)
        assert c.severity is ConflictSeverity.HIGH

    def test_zero_capacity_skips_delay(self, goal_factory, as_of: date) -> None:
        conflicts = _detect(
            [goal_factory("x", 8000.0, date(2025, 10, 20))],
            as_of,
            0.0,
        )

        assert len(conflicts) == 1
        types = [a.type for a in conflicts[0].recommendations]
        assert ConflictActionType.DELAY not in types
        assert types == [ConflictActionType.INCREASE_SAVINGS, ConflictActionType.REDUCE_SCOPE]

    def test_overdue_goal_has_no_accrual(self, goal_factory, as_of: date) -> None:
        conflicts = _detect([goal_factory("late", 1200.0, date(2024, 12, 1))], as_of, 1000.0)

        assert len(conflicts) == 1
        c = conflicts[0]
        assert c.months_until == 0
        assert c.available_cash == 0.0
        assert c.shortage == pytest.approx(1200.0)
        assert c.severity is ConflictSeverity.CRITICAL
        assert c.recommendations[0].amount == 1200.0

    def test_spread_out_for_busy_month_without_conflict(self, goal_factory, as_of: date) -> None:
        conflicts = _detect(
            [
                goal_factory("a", 4000.0, date(2025, 7, 10)),
                goal_factory("b", 3000.0, date(2025, 7, 20)),
            ],
            as_of,
            2000.0,
        )

        assert len(conflicts) == 1
        c = conflicts[0]
        assert c.is_conflict is False
        assert c.severity is ConflictSeverity.SAFE
        assert c.percentage_used == pytest.approx(7000.0 / 12000.0 * 100.0)
        assert [a.type for a in c.recommendations] == [ConflictActionType.SPREAD_OUT]
        assert "2 goals due in July 2025" in c.recommendations[0].description

    def test_multiple_goals_with_low_utilisation_kept_without_actions(
        self, goal_factory, as_of: date
    ) -> None:
        conflicts = _detect(
            [
                goal_factory("a", 4000.0, date(2025, 7, 10)),
                goal_factory("b", 3000.0, date(2025, 7, 20)),
            ],
            as_of,
            5000.0,
        )

        assert len(conflicts) == 1
        assert conflicts[0].has_multiple_goals is True
        assert conflicts[0].recommendations == ()

    def test_single_comfortable_goal_is_not_reported(self, goal_factory, as_of: date) -> None:
        conflicts = _detect([goal_factory("a", 4000.0, date(2025, 7, 10))], as_of, 5000.0)

        assert conflicts == []

    def test_months_are_chronological(self, goal_factory, as_of: date) -> None:
        conflicts = _detect(
            [
                goal_factory("late", 30000.0, date(2025, 9, 1)),
                goal_factory("early", 9000.0, date(2025, 3, 1)),
            ],
            as_of,
            1000.0,
        )

        assert [c.month_key for c in conflicts] == ["2025-03", "2025-09"]

    def test_shared_and_earmarked_pools(self, goal_factory, as_of: date) -> None:
        goals = [goal_factory("car", 10000.0, date(2025, 7, 10), saved=(3000.0,))]

        shared = _detect(goals, as_of, 1000.0)
        earmarked = _detect(
            goals,
            as_of,
            1000.0,
            AnalysisConfig(pool_strategy=SavingsPoolStrategy.EARMARKED),
        )

        assert len(shared) == 1
        assert shared[0].available_cash == pytest.approx(9000.0)
        assert shared[0].is_conflict is False

        assert len(earmarked) == 1
        c = earmarked[0]
        assert c.available_cash == pytest.approx(6000.0)
        assert c.is_conflict is True
        assert c.shortage == pytest.approx(1000.0)
        assert c.severity is ConflictSeverity.MODERATE
        increase, reduce_scope = c.recommendations
        assert increase.amount == 167.0
        assert reduce_scope.amount == pytest.approx(1000.0)
        assert "(10%)" in reduce_scope.description

    def test_shortage_never_grows_with_capacity(self, goal_factory, as_of: date) -> None:
        goals = [
            goal_factory("wedding", 12000.0, date(2025, 7, 10)),
            goal_factory("trip", 6000.0, date(2025, 7, 5)),
            goal_factory("car", 20000.0, date(2025, 11, 1)),
        ]

        previous = None
        for capacity in (500.0, 1000.0, 2500.0, 4000.0, 8000.0):
            shortages = {c.month_key: c.shortage for c in _detect(goals, as_of, capacity)}
            if previous is not None:
                for key, shortage in shortages.items():
                    assert shortage <= previous.get(key, 0.0) + 1e-9
            previous = shortages

    def test_actions_limited_per_month(self, goal_factory, as_of: date) -> None:
        conflicts = _detect(
            [
                goal_factory("x", 8000.0, date(2025, 10, 20)),
                goal_factory("y", 6000.0, date(2025, 10, 20)),
            ],
            as_of,
            1000.0,
            AnalysisConfig(max_conflict_recommendations=3),
        )

        assert [a.type for a in conflicts[0].recommendations] == [
            ConflictActionType.DELAY,
            ConflictActionType.INCREASE_SAVINGS,
            ConflictActionType.REDUCE_SCOPE,
        ]
