"""Beacon – top-level package exports.

This module re-exports the planning engine entry points for convenience.
"""

from beacon.planning import (
    AnalysisConfig,
    Contribution,
    Goal,
    PortfolioAnalysis,
    PortfolioEngine,
    analyze_portfolio,
)
