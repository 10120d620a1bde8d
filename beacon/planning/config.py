"""Beacon – Portfolio planning engine configuration models.

This module defines the Pydantic model holding every threshold used by
the planning engine. Defaults reproduce the production heuristics; tests
and experiments can derive variants via ``model_copy(update=...)``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from beacon.core.config import BeaconConfig

from .types import SavingsPoolStrategy


class AnalysisConfig(BaseModel):
    """Configuration for a portfolio analysis.

    Attributes:
        on_track_ratio: A goal needing at most this fraction of capacity
            per month is ``on-track``.
        challenging_ratio: A goal needing at most this multiple of
            capacity per month is ``challenging``; beyond it
            ``unrealistic``.
        high_priority_days: Deadlines closer than this are HIGH priority.
        medium_priority_days: Deadlines closer than this (and not HIGH)
            are MEDIUM priority; further ones are LOW.
        default_months_without_deadline: Months assumed for undated goals
            when scoring the time buffer.
        full_time_buffer_months: Average months-to-deadline that earns the
            full time-buffer score.
        on_track_percentage: Progress (in percent) at which a goal counts
            towards the distribution score.
        max_recommendations: Maximum portfolio-level recommendations.
        urgent_days: Deadlines closer than this count as urgent.
        urgent_focus_months: Months over which urgent goals' remaining
            amounts are amortised.
        accelerate_ratio: Portfolio requirement below this fraction of
            capacity triggers the ``accelerate`` suggestion.
        pool_strategy: How current savings are credited in the conflict
            projection.
        severity_critical_ratio: Demand/availability ratio above which a
            month is CRITICAL.
        severity_high_ratio: Ratio at or above which a month is HIGH.
        severity_moderate_ratio: Ratio above which a month is MODERATE.
        utilisation_threshold: Percentage of available cash above which a
            non-conflicting month is still reported.
        max_conflict_recommendations: Maximum actions per conflict month.
        delay_buffer_months: Months added on top of the minimum delay.
        scope_reduction_fraction: Fraction of the largest goal's remaining
            amount proposed as a scope cut.
        history_months: Number of recent calendar months (including the
            current one) in the contribution history.
        history_conflict_ratio: Monthly contributions above this multiple
            of capacity flag a month in the history.
        insight_friction_share: Share of capacity a dated goal must need per
            month to take part in a same-month friction insight.
        insight_velocity_gap_ratio: Portfolio gap, as a fraction of
            capacity, above which the velocity-gap insight is raised.
        insight_critical_months: Goals with at most this many months left
            and less than ``on_track_percentage`` saved are critical.
        insight_nearly_complete_percentage: Progress at which a goal is
            celebrated rather than coached.
        insight_starting_percentage: Progress below which a long-running
            goal gets encouragement.
        insight_encouragement_months: Months left above which that
            encouragement applies.
        insight_opportunity_ratio: Goals needing less than this fraction of
            capacity may be accelerated.
        insight_opportunity_percentage: Minimum progress for the
            acceleration opportunity.
        insight_suggested_share: Fraction of capacity suggested as the
            accelerated contribution.
        environment: Deployment environment name, reported in the analysis
            log line.
    """

    on_track_ratio: float = Field(default=0.3, ge=0.0)
    challenging_ratio: float = Field(default=1.5, ge=1.0)
    high_priority_days: int = 180
    medium_priority_days: int = 365

    default_months_without_deadline: int = 12
    full_time_buffer_months: int = Field(default=24, gt=0)
    on_track_percentage: float = 50.0

    max_recommendations: int = Field(default=3, ge=0)
    urgent_days: int = 365
    urgent_focus_months: int = Field(default=12, gt=0)
    accelerate_ratio: float = 0.7

    pool_strategy: SavingsPoolStrategy = SavingsPoolStrategy.SHARED
    severity_critical_ratio: float = 1.5
    severity_high_ratio: float = 1.2
    severity_moderate_ratio: float = 1.0
    utilisation_threshold: float = 50.0
    max_conflict_recommendations: int = Field(default=2, ge=0)
    delay_buffer_months: int = 3
    scope_reduction_fraction: float = Field(default=0.2, ge=0.0, le=1.0)

    history_months: int = Field(default=6, ge=1)
    history_conflict_ratio: float = 1.2

    insight_friction_share: float = 0.2
    insight_velocity_gap_ratio: float = 0.3
    insight_critical_months: int = 2
    insight_nearly_complete_percentage: float = 90.0
    insight_starting_percentage: float = 20.0
    insight_encouragement_months: int = 6
    insight_opportunity_ratio: float = 0.5
    insight_opportunity_percentage: float = 30.0
    insight_suggested_share: float = Field(default=0.7, ge=0.0)

    environment: str = "development"

    @classmethod
    def from_settings(cls, settings: BeaconConfig) -> "AnalysisConfig":
        """Build an analysis config from environment-driven settings.

        Environment variables:
        - SAVINGS_POOL_STRATEGY
        - HISTORY_MONTHS
        - ENVIRONMENT

        All other thresholds keep their defaults.
        """

        return cls(
            pool_strategy=SavingsPoolStrategy(settings.savings_pool_strategy),
            history_months=settings.history_months,
            environment=settings.environment,
        )
