"""Tests for PortfolioEngine orchestration.

These tests verify that PortfolioEngine fetches goals through its
provider exactly when asked to, and that ``analyze_portfolio`` validates
its arguments and wires the planning components together.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Sequence

import pytest

from beacon.planning import (
    AnalysisConfig,
    Goal,
    HealthBand,
    InsightType,
    PortfolioEngine,
    SavingsPoolStrategy,
    analyze_portfolio,
)


@dataclass
class _StubProvider:
    goals_by_owner: Dict[str, Sequence[Goal]]
    calls: List[str] = field(default_factory=list)

    def load_goals(self, owner_id: str) -> List[Goal]:
        self.calls.append(owner_id)
        return list(self.goals_by_owner.get(owner_id, ()))


@pytest.fixture
def two_goals(goal_factory) -> List[Goal]:
    return [
        goal_factory("wedding", 12000.0, date(2025, 7, 10)),
        goal_factory("trip", 6000.0, date(2025, 7, 5)),
    ]


class TestPortfolioEngine:
    def test_analyze_fetches_fresh_goals_every_time(self, two_goals, as_of: date) -> None:
        provider = _StubProvider({"alice": two_goals})
        engine = PortfolioEngine(provider=provider)

        first = engine.analyze("alice", 2500.0, as_of)
        second = engine.analyze("alice", 3000.0, as_of)

        assert provider.calls == ["alice", "alice"]
        assert [m.goal_id for m in first.goals] == ["trip", "wedding"]
        assert second.capacity == 3000.0

    def test_reanalyze_does_not_touch_provider(self, two_goals, as_of: date) -> None:
        provider = _StubProvider({"alice": two_goals})
        engine = PortfolioEngine(provider=provider)

        goals = engine.fetch_goals("alice")
        before = engine.reanalyze(goals, 2500.0, as_of)
        after = engine.reanalyze(goals, 5000.0, as_of)

        assert provider.calls == ["alice"]
        assert before.totals.is_realistic is False
        assert after.totals.is_realistic is True
        assert after.health_score > before.health_score

    def test_engine_config_is_applied(self, two_goals, as_of: date) -> None:
        config = AnalysisConfig(pool_strategy=SavingsPoolStrategy.EARMARKED, max_recommendations=1)
        engine = PortfolioEngine(provider=_StubProvider({"alice": two_goals}), config=config)

        analysis = engine.analyze("alice", 2500.0, as_of)

        assert analysis.pool_strategy is SavingsPoolStrategy.EARMARKED
        assert len(analysis.recommendations) == 1

    def test_unknown_owner_gives_empty_analysis(self, as_of: date) -> None:
        engine = PortfolioEngine(provider=_StubProvider({}))

        analysis = engine.analyze("nobody", 2500.0, as_of)

        assert analysis.is_empty is True


class TestAnalyzePortfolioValidation:
    @pytest.mark.parametrize("goals", [None, {"id": "a"}, "goals", iter(())])
    def test_goals_must_be_a_list_or_tuple(self, goals, as_of: date) -> None:
        with pytest.raises(TypeError):
            analyze_portfolio(goals, 1000.0, as_of)

    @pytest.mark.parametrize("now", [None, "2025-01-15", 1736899200])
    def test_now_must_be_a_date(self, now) -> None:
        with pytest.raises(TypeError):
            analyze_portfolio([], 1000.0, now)

    @pytest.mark.parametrize("capacity", [None, "1000", True])
    def test_capacity_must_be_numeric(self, capacity, as_of: date) -> None:
        with pytest.raises(TypeError):
            analyze_portfolio([], capacity, as_of)

    @pytest.mark.parametrize("capacity", [math.nan, math.inf, -math.inf])
    def test_capacity_must_be_finite(self, capacity, as_of: date) -> None:
        with pytest.raises(ValueError):
            analyze_portfolio([], capacity, as_of)

    def test_integer_capacity_is_accepted(self, two_goals, as_of: date) -> None:
        analysis = analyze_portfolio(two_goals, 2500, as_of)

        assert analysis.capacity == 2500.0
        assert isinstance(analysis.capacity, float)


class TestAnalyzePortfolio:
    def test_empty_portfolio_sentinel(self, goal_factory, as_of: date) -> None:
        goals = [goal_factory("zero", 0.0), {"id": "neg", "targetAmount": -10}]

        analysis = analyze_portfolio(goals, 2500.0, as_of)

        assert analysis.is_empty is True
        assert analysis.goals == ()
        assert analysis.recommendations == ()
        assert analysis.conflicts == ()
        assert analysis.contribution_history == ()
        assert analysis.health_score == 0
        assert analysis.health_band is HealthBand.REQUIRES_ACTION
        assert analysis.health_message == ""
        assert analysis.insight is None
        assert analysis.as_of == as_of

    def test_no_goals_at_all(self, as_of: date) -> None:
        assert analyze_portfolio([], 2500.0, as_of).is_empty is True

    def test_non_financial_goals_are_excluded(self, goal_factory, as_of: date) -> None:
        goals = [goal_factory("zero", 0.0, date(2025, 3, 1)), goal_factory("real", 1000.0, date(2025, 7, 10))]

        analysis = analyze_portfolio(goals, 2500.0, as_of)

        assert analysis.is_empty is False
        assert [m.goal_id for m in analysis.goals] == ["real"]
        assert analysis.totals.total_budget_needed == 1000.0

    def test_raw_records_are_accepted(self, as_of: date) -> None:
        goals = [
            {
                "id": "trip",
                "title": "Trip",
                "targetAmount": "6000",
                "targetDate": "2025-07-05",
                "contributions": [{"amount": "1000", "date": "2025-01-02"}, {"amount": "oops"}],
            }
        ]

        analysis = analyze_portfolio(goals, 2500.0, as_of)

        assert analysis.goals[0].total_saved == 1000.0
        assert analysis.goals[0].contribution_count == 2
        assert analysis.contribution_history[-1].total_contributed == 1000.0

    def test_datetime_now_sets_as_of_date(self, two_goals) -> None:
        analysis = analyze_portfolio(two_goals, 2500.0, datetime(2025, 1, 15, 9, 30))

        assert analysis.as_of == date(2025, 1, 15)

    def test_health_band_matches_score(self, two_goals, as_of: date) -> None:
        analysis = analyze_portfolio(two_goals, 2500.0, as_of)

        assert analysis.health_score == 30
        assert analysis.health_band is HealthBand.REQUIRES_ACTION
        assert analysis.health_message == "Requires immediate action"
        assert analysis.health_components is not None
        assert analysis.health_components.total == pytest.approx(30.0)

    def test_to_dict_is_json_serialisable(self, two_goals, as_of: date) -> None:
        payload = analyze_portfolio(two_goals, 2500.0, as_of).to_dict()

        decoded = json.loads(json.dumps(payload))
        assert decoded["as_of"] == "2025-01-15"
        assert decoded["pool_strategy"] == "shared"
        assert decoded["goals"][0]["status"] == "achievable"
        assert decoded["goals"][0]["target_date"] == "2025-07-05"
        assert decoded["conflicts"][0]["severity"] == "HIGH"
        assert decoded["conflicts"][0]["goal_ids"] == ["trip", "wedding"]
        assert decoded["recommendations"][0]["type"] == "increase-capacity"
        assert decoded["totals"]["is_realistic"] is False
        assert decoded["health_message"] == "Requires immediate action"
        assert decoded["insight"]["type"] == "timeline-friction"
        assert decoded["insight"]["goal_ids"] == ["trip", "wedding"]

    def test_same_month_deadlines_surface_friction_insight(self, two_goals, as_of: date) -> None:
        analysis = analyze_portfolio(two_goals, 2500.0, as_of)

        assert analysis.insight is not None
        assert analysis.insight.type is InsightType.TIMELINE_FRICTION
        assert analysis.insight.priority == 10
        assert "July 2025" in analysis.insight.message

    def test_summary_log_names_environment(
        self, two_goals, as_of: date, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="beacon.planning.engine")
        config = AnalysisConfig(environment="staging")

        analyze_portfolio(two_goals, 2500.0, as_of, config)

        summary = [r.getMessage() for r in caplog.records if r.name == "beacon.planning.engine"]
        assert len(summary) == 1
        assert "environment=staging" in summary[0]
        assert "insight=timeline-friction" in summary[0]
