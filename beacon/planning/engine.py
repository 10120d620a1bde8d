"""Beacon – Portfolio analysis orchestration.

This module wires the planning components together:

    goal metrics -> portfolio totals -> {health score, recommendations,
    timeline conflicts, contribution history, insight}

:func:`analyze_portfolio` is the pure entry point. :class:`PortfolioEngine`
adds the data-access seam: ``analyze`` always fetches fresh goals from its
provider, while ``reanalyze`` recomputes from goals the caller already
holds (e.g. after the user edits their monthly capacity) without any I/O.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Sequence

from beacon.core.logging import get_logger
from beacon.core.time import as_date

from .aggregate import aggregate_portfolio, is_financial
from .config import AnalysisConfig
from .conflicts import detect_timeline_conflicts
from .health import (
    classify_health,
    compute_health_components,
    health_message,
    score_from_components,
)
from .history import build_contribution_history
from .inputs import coerce_goals
from .insights import select_insight
from .metrics import compute_goal_metrics, sort_goal_metrics
from .recommendations import generate_recommendations
from .storage import GoalProvider
from .types import Goal, PortfolioAnalysis


logger = get_logger(__name__)


def _validate_call(goals: Any, capacity: Any, now: Any) -> float:
    if not isinstance(goals, (list, tuple)):
        raise TypeError(f"goals must be a list or tuple, got {type(goals).__name__}")
    if not isinstance(now, date):
        raise TypeError(f"now must be a date or datetime, got {type(now).__name__}")
    if isinstance(capacity, bool) or not isinstance(capacity, (int, float)):
        raise TypeError(f"capacity must be a number, got {type(capacity).__name__}")
    capacity = float(capacity)
    if not math.isfinite(capacity):
        raise ValueError(f"capacity must be finite, got {capacity}")
    return capacity


def analyze_portfolio(
    goals: Sequence[Any],
    capacity: float,
    now: date | datetime,
    config: AnalysisConfig | None = None,
) -> PortfolioAnalysis:
    """Analyse a goal portfolio against a monthly savings capacity.

    Args:
        goals: List or tuple of :class:`Goal` instances or raw goal
            mappings. Malformed fields are normalised, never fatal.
        capacity: Monthly savings capacity. Zero or negative capacity is
            allowed and means every requirement is over capacity.
        now: Analysis instant. Nothing in the engine reads the clock.
        config: Engine thresholds; defaults to :class:`AnalysisConfig`.

    Returns:
        A :class:`PortfolioAnalysis`. When no goal has a positive target
        amount the result has ``is_empty=True``.

    Raises:
        TypeError: If ``goals`` is not a list/tuple, ``now`` is not a
            date, or ``capacity`` is not a number.
        ValueError: If ``capacity`` is NaN or infinite.
    """

    capacity = _validate_call(goals, capacity, now)
    config = config or AnalysisConfig()
    as_of = as_date(now)

    financial = [g for g in coerce_goals(goals) if is_financial(g.target_amount)]
    if not financial:
        logger.info("analyze_portfolio: no financial goals among %d records", len(goals))
        return PortfolioAnalysis.empty(as_of, capacity, config.pool_strategy)

    metrics = sort_goal_metrics(compute_goal_metrics(g, now, capacity, config) for g in financial)
    totals = aggregate_portfolio(metrics, capacity)

    components = compute_health_components(metrics, totals, capacity, config)
    score = score_from_components(components)
    recommendations = generate_recommendations(metrics, totals, capacity, config)
    conflicts = detect_timeline_conflicts(metrics, now, capacity, totals.total_saved, config)
    history = build_contribution_history(financial, now, capacity, config)
    insight = select_insight(metrics, totals, capacity, config)
    band = classify_health(score)

    logger.info(
        "analyze_portfolio: environment=%s as_of=%s goals=%d capacity=%.2f required=%.2f "
        "score=%d recommendations=%d conflicts=%d insight=%s",
        config.environment,
        as_of,
        len(metrics),
        capacity,
        totals.monthly_required,
        score,
        len(recommendations),
        sum(1 for c in conflicts if c.is_conflict),
        insight.type.value if insight is not None else None,
    )

    return PortfolioAnalysis(
        as_of=as_of,
        capacity=capacity,
        pool_strategy=config.pool_strategy,
        goals=tuple(metrics),
        totals=totals,
        health_score=score,
        health_band=band,
        health_message=health_message(band),
        health_components=components,
        recommendations=tuple(recommendations),
        conflicts=tuple(conflicts),
        contribution_history=tuple(history),
        insight=insight,
        is_empty=False,
    )


@dataclass
class PortfolioEngine:
    """Orchestrator binding the analysis to a goal data-access provider.

    Attributes:
        provider: Source of goals with contributions attached.
        config: Engine thresholds used for every analysis.
    """

    provider: GoalProvider
    config: AnalysisConfig = field(default_factory=AnalysisConfig)

    def fetch_goals(self, owner_id: str) -> List[Goal]:
        """Load the owner's goals from the provider."""

        return self.provider.load_goals(owner_id)

    def analyze(self, owner_id: str, capacity: float, now: date | datetime) -> PortfolioAnalysis:
        """Fetch fresh goals for ``owner_id`` and analyse them."""

        goals = self.fetch_goals(owner_id)
        return analyze_portfolio(goals, capacity, now, self.config)

    def reanalyze(
        self,
        goals: Sequence[Goal],
        capacity: float,
        now: date | datetime,
    ) -> PortfolioAnalysis:
        """Recompute an analysis from already-fetched goals, without I/O."""

        return analyze_portfolio(list(goals), capacity, now, self.config)
