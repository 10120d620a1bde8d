"""Beacon – Portfolio planning engine types.

This module defines the in-memory representations consumed and produced
by the planning engine: input goals and contributions, derived per-goal
metrics, portfolio totals, recommendations, timeline conflicts, the
portfolio insight and the final :class:`PortfolioAnalysis`.

All output types are frozen dataclasses; an analysis is recomputed from
scratch on every request and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional, Tuple

from beacon.core.types import JsonDict, Number


class GoalStatus(str, Enum):
    """Affordability classification for a single goal.

    Ordered from best to worst once a deadline is known:

    - COMPLETE: Target reached or exceeded.
    - NO_DEADLINE: Nothing is required per month (no deadline, or
      nothing left to save).
    - ON_TRACK: Needs at most 30% of monthly capacity.
    - ACHIEVABLE: Fits within monthly capacity.
    - CHALLENGING: Needs up to 150% of monthly capacity.
    - UNREALISTIC: Needs more than 150% of capacity (or capacity <= 0).
    """

    COMPLETE = "complete"
    NO_DEADLINE = "no-deadline"
    ON_TRACK = "on-track"
    ACHIEVABLE = "achievable"
    CHALLENGING = "challenging"
    UNREALISTIC = "unrealistic"


class GoalPriority(str, Enum):
    """Urgency derived from the distance to a goal's deadline."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ConflictSeverity(str, Enum):
    """How far a month's demand exceeds projected available cash."""

    SAFE = "SAFE"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class HealthBand(str, Enum):
    """Coarse reading of the 0-100 portfolio health score."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    NEEDS_ATTENTION = "NEEDS_ATTENTION"
    REQUIRES_ACTION = "REQUIRES_ACTION"


class SavingsPoolStrategy(str, Enum):
    """How current savings are credited when projecting a month's cash.

    - SHARED: All saved money is one fungible pool available to any goal.
    - EARMARKED: Saved money stays with the goal it was contributed to,
      so only future accrual is available to cover remaining demand.
    """

    SHARED = "shared"
    EARMARKED = "earmarked"


class RecommendationType(str, Enum):
    INCREASE_CAPACITY = "increase-capacity"
    FOCUS_URGENT = "focus-urgent"
    ADJUST_TIMELINE = "adjust-timeline"
    ACCELERATE = "accelerate"


class ConflictActionType(str, Enum):
    DELAY = "delay"
    INCREASE_SAVINGS = "increase-savings"
    REDUCE_SCOPE = "reduce-scope"
    SPREAD_OUT = "spread-out"


class Difficulty(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class InsightType(str, Enum):
    TIMELINE_FRICTION = "timeline-friction"
    VELOCITY_GAP = "velocity-gap"
    CRITICAL = "critical"
    VELOCITY_WARNING = "velocity-warning"
    PROGRESS = "progress"
    CELEBRATION = "celebration"
    PLANNING = "planning"
    ENCOURAGEMENT = "encouragement"
    OPPORTUNITY = "opportunity"
    SETUP = "setup"


# ============================================================================
# Inputs
# ============================================================================


@dataclass(frozen=True)
class Contribution:
    """A dated monetary amount applied toward a goal.

    Attributes:
        amount: Contributed amount. Negative values (withdrawals) are
            allowed and summed as-is.
        date: Date of the contribution, if known.
        category: Optional free-form category label.
    """

    amount: Number
    date: Optional[date] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class Goal:
    """A financial goal (milestone) with its contribution history.

    Attributes:
        id: Stable goal identifier.
        title: Human-readable title.
        target_amount: Amount to save. Goals with ``target_amount <= 0``
            are treated as non-financial and excluded from analysis.
        target_date: Optional deadline.
        contributions: Contributions already applied to the goal.
    """

    id: str
    title: str
    target_amount: Number
    target_date: Optional[date] = None
    contributions: Tuple[Contribution, ...] = ()


# ============================================================================
# Derived values
# ============================================================================


@dataclass(frozen=True)
class GoalMetrics:
    """Derived affordability figures for a single goal.

    Attributes:
        goal_id: Identifier of the source goal.
        title: Title of the source goal.
        target_amount: Target amount of the source goal.
        target_date: Deadline of the source goal, if any.
        total_saved: Sum of contributions, floored at zero.
        remaining: ``target_amount - total_saved``; negative when the goal
            is overfunded.
        percentage_saved: Progress in percent (0 when the target is 0).
        days_until_deadline: Whole days until the deadline, or ``None``.
            Negative for overdue goals.
        months_until_deadline: Months until the deadline (30-day months,
            at least 1), or ``None``.
        monthly_required: Savings needed per month to hit the deadline.
        status: Affordability classification against capacity.
        priority: Urgency derived from ``days_until_deadline``.
        contribution_count: Number of contributions considered.
    """

    goal_id: str
    title: str
    target_amount: float
    target_date: Optional[date]
    total_saved: float
    remaining: float
    percentage_saved: float
    days_until_deadline: Optional[int]
    months_until_deadline: Optional[int]
    monthly_required: float
    status: GoalStatus
    priority: GoalPriority
    contribution_count: int = 0


@dataclass(frozen=True)
class PortfolioTotals:
    """Portfolio-wide sums and the overall monthly requirement."""

    total_budget_needed: float = 0.0
    total_saved: float = 0.0
    total_remaining: float = 0.0
    percentage_saved: float = 0.0
    soonest_deadline: Optional[date] = None
    months_to_soonest: Optional[int] = None
    monthly_required: float = 0.0
    monthly_gap: float = 0.0
    is_realistic: bool = True


@dataclass(frozen=True)
class HealthComponents:
    """The four weighted signals behind the health score."""

    progress: float
    feasibility: float
    time_buffer: float
    distribution: float

    @property
    def total(self) -> float:
        return self.progress + self.feasibility + self.time_buffer + self.distribution


@dataclass(frozen=True)
class Recommendation:
    """A portfolio-level suggestion.

    ``amount`` carries the figure the description refers to (required
    increase, monthly allocation, surplus) so display layers can format
    it themselves.
    """

    type: RecommendationType
    title: str
    description: str
    impact: str
    difficulty: Difficulty
    amount: Optional[float] = None
    goal_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConflictRecommendation:
    """A remedial action for a single conflict month."""

    type: ConflictActionType
    title: str
    description: str
    impact: str
    goal_id: Optional[str] = None
    amount: Optional[float] = None
    suggested_date: Optional[date] = None


@dataclass(frozen=True)
class TimelineConflict:
    """Demand versus projected availability for one calendar month.

    Attributes:
        month_key: ``YYYY-MM`` key of the month.
        month: First day of the month.
        total_needed: Sum of remaining amounts of goals due that month.
        goal_ids: Goals due that month, in analysis order.
        months_until: Calendar months from the analysis date (>= 0).
        available_cash: Savings pool plus capacity accrued until the month.
        is_conflict: Whether demand exceeds available cash.
        shortage: ``max(0, total_needed - available_cash)``.
        severity_ratio: ``total_needed / max(available_cash, 1)``.
        severity: Classification of ``severity_ratio``.
        percentage_used: ``severity_ratio * 100``.
        has_multiple_goals: Whether more than one goal is due that month.
        recommendations: At most two remedial actions.
    """

    month_key: str
    month: date
    total_needed: float
    goal_ids: Tuple[str, ...]
    months_until: int
    available_cash: float
    is_conflict: bool
    shortage: float
    severity_ratio: float
    severity: ConflictSeverity
    percentage_used: float
    has_multiple_goals: bool
    recommendations: Tuple[ConflictRecommendation, ...] = ()


@dataclass(frozen=True)
class Insight:
    """The single most pressing observation about a portfolio.

    ``priority`` ranks candidate insights (higher first); ``goal_ids``
    names the goals the message refers to.
    """

    type: InsightType
    title: str
    message: str
    recommendation: str
    priority: int
    actions: Tuple[str, ...] = ()
    goal_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContributionMonth:
    """Total contributions made in one recent calendar month."""

    month_key: str
    month: date
    total_contributed: float
    load_percent: float
    has_conflict: bool


@dataclass(frozen=True)
class PortfolioAnalysis:
    """Complete, immutable result of one portfolio analysis.

    ``is_empty`` is True iff no goal had a positive target amount; in that
    case every collection is empty, the score is zero and neither a
    health message nor an insight is set.
    """

    as_of: date
    capacity: float
    pool_strategy: SavingsPoolStrategy
    goals: Tuple[GoalMetrics, ...] = ()
    totals: PortfolioTotals = field(default_factory=PortfolioTotals)
    health_score: int = 0
    health_band: HealthBand = HealthBand.REQUIRES_ACTION
    health_message: str = ""
    health_components: Optional[HealthComponents] = None
    recommendations: Tuple[Recommendation, ...] = ()
    conflicts: Tuple[TimelineConflict, ...] = ()
    contribution_history: Tuple[ContributionMonth, ...] = ()
    insight: Optional[Insight] = None
    is_empty: bool = False

    @classmethod
    def empty(
        cls,
        as_of: date,
        capacity: float,
        pool_strategy: SavingsPoolStrategy,
    ) -> "PortfolioAnalysis":
        """Return the sentinel analysis for a portfolio with no financial goals."""

        return cls(as_of=as_of, capacity=capacity, pool_strategy=pool_strategy, is_empty=True)

    def to_dict(self) -> JsonDict:
        """Return a JSON-serialisable representation of the analysis."""

        return _to_jsonable(self)


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return value
