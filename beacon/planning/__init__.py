"""Beacon – Portfolio planning engine package.

This package exposes the goal/analysis types, engine configuration,
data-access providers and the ``analyze_portfolio`` entry point.
"""

from .types import (
    Contribution,
    ConflictActionType,
    ConflictRecommendation,
    ConflictSeverity,
    ContributionMonth,
    Difficulty,
    Goal,
    GoalMetrics,
    GoalPriority,
    GoalStatus,
    HealthBand,
    HealthComponents,
    Insight,
    InsightType,
    PortfolioAnalysis,
    PortfolioTotals,
    Recommendation,
    RecommendationType,
    SavingsPoolStrategy,
    TimelineConflict,
)
from .config import AnalysisConfig
from .inputs import coerce_goal, coerce_goals
from .storage import GoalProvider, InMemoryGoalProvider, JsonGoalProvider
from .engine import PortfolioEngine, analyze_portfolio
